"""Host environment detection"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Checked in this order; the first marker present wins
REDHAT_RELEASE = "etc/redhat-release"
SUSE_RELEASE = "etc/SuSE-release"
OS_RELEASE = "etc/os-release"


class Distribution(Enum):
    """OS distribution families the installer distinguishes."""
    RHEL = "rhel"
    UBUNTU = "ubuntu"
    SLES = "sles"
    FEDORA = "fedora"
    UNKNOWN = "unknown"

    @classmethod
    def from_id(cls, value: str) -> "Distribution":
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class HostProfile:
    """Distribution and version of the host, detected once per run."""
    distribution: Distribution
    version_id: str = ""

    @property
    def major_version(self) -> Optional[int]:
        """Leading numeric component of VERSION_ID ('18.04' -> 18), or None."""
        head = self.version_id.split(".")[0]
        return int(head) if head.isdigit() else None

    @property
    def label(self) -> str:
        return f"{self.distribution.value}-{self.version_id}"


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release KEY=value lines, stripping surrounding quotes."""
    info = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        info[key.strip()] = value.strip().strip('"').strip("'")
    return info


def _read_os_release(root: str) -> dict[str, str]:
    try:
        with open(os.path.join(root, OS_RELEASE), "r") as fh:
            return parse_os_release(fh.read())
    except (OSError, UnicodeDecodeError):
        return {}


def identify_host(root: str = "/") -> HostProfile:
    """Work out which distribution this is.

    RHEL-family hosts are recognised by /etc/redhat-release before anything
    else, then SUSE by /etc/SuSE-release, then the generic os-release ID.
    An unrecognised host comes back as Distribution.UNKNOWN; this never raises.
    """
    os_release = _read_os_release(root)
    version_id = os_release.get("VERSION_ID", "")

    if os.path.exists(os.path.join(root, REDHAT_RELEASE)):
        distribution = Distribution.RHEL
    elif os.path.exists(os.path.join(root, SUSE_RELEASE)):
        distribution = Distribution.SLES
    elif os_release.get("ID"):
        distribution = Distribution.from_id(os_release["ID"])
    else:
        distribution = Distribution.UNKNOWN

    return HostProfile(distribution, version_id)
