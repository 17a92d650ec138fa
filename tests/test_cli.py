"""Tests for the command line entry point."""

import pytest

from nvidia_driver_installer import cli
from nvidia_driver_installer.outcome import InstallOutcome


class StubOrchestrator:
    outcome = InstallOutcome.success()
    runs = []

    def __init__(self, config, runner, prog=None):
        self.config = config

    def run(self, continuation=False):
        StubOrchestrator.runs.append(continuation)
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome


@pytest.fixture
def stub(monkeypatch, tmp_path):
    StubOrchestrator.runs = []
    StubOrchestrator.outcome = InstallOutcome.success()
    monkeypatch.setattr(cli, "PhaseOrchestrator", StubOrchestrator)
    monkeypatch.setattr(cli.os, "geteuid", lambda: 0)
    monkeypatch.setenv("NVIDIA_INSTALL_LOG", str(tmp_path / "install.log"))
    return StubOrchestrator


def _exit_code(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


@pytest.mark.parametrize("argv, continuation", [
    ([], False),
    (["--cont"], True),
    (["-cont"], True),
    (["--continue"], True),
])
def test_phase_selection(stub, argv, continuation):
    assert _exit_code(argv) == 0
    assert stub.runs == [continuation]


def test_unknown_argument_is_usage_error(stub):
    assert _exit_code(["--bogus"]) == 1
    assert stub.runs == []


def test_help(stub, capsys):
    assert _exit_code(["--help"]) == 0
    assert "--cont" in capsys.readouterr().out


def test_failed_outcome_exits_one(stub):
    stub.outcome = InstallOutcome.failed("boom", exit_code=3)

    assert _exit_code([]) == 1


def test_blocked_outcome_exits_zero(stub):
    stub.outcome = InstallOutcome.blocked("no GPU")

    assert _exit_code([]) == 0


def test_requires_root(stub, monkeypatch):
    monkeypatch.setattr(cli.os, "geteuid", lambda: 1000)

    assert _exit_code([]) == 1
    assert stub.runs == []


def test_interrupt_exits_one(stub):
    stub.outcome = KeyboardInterrupt()

    assert _exit_code([]) == 1


def test_unexpected_error_is_logged(stub, tmp_path):
    stub.outcome = ValueError("unexpected")

    assert _exit_code(["--cont"]) == 1
    log = (tmp_path / "install.log").read_text()
    assert "ERROR: Installation failed: unexpected" in log


def test_parse_phase():
    assert cli.parse_phase([]) is False
    assert cli.parse_phase(["--cont"]) is True
    assert cli.parse_phase(["start"]) is None
