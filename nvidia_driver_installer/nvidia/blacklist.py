"""Keep the nouveau driver from loading on the next boot"""

import os

from ..errors import ConflictMitigationFailure
from ..outcome import InstallOutcome
from ..system.hardware import CONFLICTING_DRIVER
from ..utils.logging import log_info, log_warn

BLACKLIST_DIRECTIVES = (
    f"blacklist {CONFLICTING_DRIVER}",
    f"options {CONFLICTING_DRIVER} modeset=0",
)


def _normalize(line: str) -> str:
    return " ".join(line.split("#", 1)[0].split())


def missing_directives(content: str) -> list[str]:
    """Directives from BLACKLIST_DIRECTIVES not present as a line in ``content``."""
    present = {_normalize(line) for line in content.splitlines()}
    return [directive for directive in BLACKLIST_DIRECTIVES if directive not in present]


def suppress_conflicting_driver(marker_path) -> InstallOutcome:
    """Create the modprobe blacklist for nouveau, once.

    An existing file that already carries both directives is left alone. An
    existing file that does not is reported for manual review and never
    rewritten, since it may hold the operator's own settings.
    """
    marker_path = str(marker_path)

    if not os.path.exists(marker_path):
        log_info(f"creating Blacklist for Nouveau Driver at {marker_path}")
        try:
            os.makedirs(os.path.dirname(marker_path) or ".", exist_ok=True)
            with open(marker_path, "w") as fh:
                fh.write("\n".join(BLACKLIST_DIRECTIVES) + "\n")
        except OSError as exc:
            error = ConflictMitigationFailure(f"Unable to write {marker_path}: {exc}")
            return error.to_outcome()
        return InstallOutcome.success(f"created {marker_path}")

    try:
        with open(marker_path, "r") as fh:
            content = fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        error = ConflictMitigationFailure(f"Unable to read {marker_path}: {exc}")
        return error.to_outcome()

    missing = missing_directives(content)
    if not missing:
        log_info(f"Nouveau Blacklist file: {marker_path} already exists")
        return InstallOutcome.success(f"{marker_path} already present")

    log_warn(f"Not sure if Blacklist file: {marker_path} is defined properly. "
             f"Please confirm its content manually:")
    log_warn(content.rstrip("\n") or "(empty file)")
    log_warn("Expected directives not found: " + ", ".join(f"'{d}'" for d in missing))
    return InstallOutcome.success(f"{marker_path} needs manual review")
