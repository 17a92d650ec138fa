"""Tests for the nouveau blacklist (modprobe.d marker file)."""

from nvidia_driver_installer.nvidia import blacklist
from nvidia_driver_installer.nvidia.blacklist import (
    BLACKLIST_DIRECTIVES,
    missing_directives,
    suppress_conflicting_driver,
)
from nvidia_driver_installer.outcome import OutcomeStatus


def test_creates_marker_with_both_directives(tmp_path):
    marker = tmp_path / "modprobe.d" / "blacklist-nouveau.conf"

    outcome = suppress_conflicting_driver(marker)

    assert outcome.ok
    assert marker.read_text() == "blacklist nouveau\noptions nouveau modeset=0\n"


def test_second_call_does_not_write(tmp_path, monkeypatch):
    marker = tmp_path / "blacklist-nouveau.conf"
    suppress_conflicting_driver(marker)
    first = marker.read_bytes()

    writes = []
    real_open = open

    def tracking_open(path, mode="r", *args, **kwargs):
        if any(flag in mode for flag in "wa+"):
            writes.append(path)
        return real_open(path, mode, *args, **kwargs)

    monkeypatch.setattr(blacklist, "open", tracking_open, raising=False)
    outcome = suppress_conflicting_driver(marker)

    assert outcome.ok
    assert writes == []
    assert marker.read_bytes() == first


def test_existing_marker_without_directive_is_left_alone(tmp_path, log_file):
    marker = tmp_path / "blacklist-nouveau.conf"
    original = b"# operator settings\nblacklist radeon\n"
    marker.write_bytes(original)

    outcome = suppress_conflicting_driver(marker)

    assert outcome.status is OutcomeStatus.SUCCESS
    assert marker.read_bytes() == original
    log = log_file.read_text()
    assert "WARN: Not sure if Blacklist file" in log
    assert "WARN: blacklist radeon" in log


def test_existing_marker_missing_modeset_is_reported(tmp_path, log_file):
    marker = tmp_path / "blacklist-nouveau.conf"
    marker.write_text("blacklist nouveau\n")

    suppress_conflicting_driver(marker)

    assert marker.read_text() == "blacklist nouveau\n"
    assert "options nouveau modeset=0" in log_file.read_text()


def test_existing_complete_marker_logs_info(tmp_path, log_file):
    marker = tmp_path / "blacklist-nouveau.conf"
    marker.write_text("blacklist  nouveau   # keep it out\noptions nouveau modeset=0\n")

    outcome = suppress_conflicting_driver(marker)

    assert outcome.ok
    log = log_file.read_text()
    assert "INFO: Nouveau Blacklist file" in log
    assert "WARN" not in log


def test_unwritable_location_fails(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    outcome = suppress_conflicting_driver(blocker / "blacklist-nouveau.conf")

    assert outcome.status is OutcomeStatus.FAILED
    assert type(outcome.error).__name__ == "ConflictMitigationFailure"


def test_missing_directives():
    assert missing_directives("\n".join(BLACKLIST_DIRECTIVES)) == []
    assert missing_directives("#blacklist nouveau\n") == list(BLACKLIST_DIRECTIVES)
