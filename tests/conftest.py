"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from nvidia_driver_installer.config import InstallerConfig
from nvidia_driver_installer.utils import logging as install_logging
from nvidia_driver_installer.utils.system import CommandResult


LSPCI_GPU = (
    "00:02.0 VGA compatible controller: Intel Corporation HD Graphics 630 (rev 04)\n"
    "01:00.0 VGA compatible controller: NVIDIA Corporation GP107 [GeForce GTX 1050 Ti] (rev a1)\n"
    "01:00.1 Audio device: NVIDIA Corporation GP107GL High Definition Audio Controller (rev a1)\n"
)

LSMOD_NOUVEAU = (
    "Module                  Size  Used by\n"
    "nouveau              1871872  3\n"
    "mxm_wmi                16384  1 nouveau\n"
    "drm_kms_helper        184320  1 nouveau\n"
    "ttm                   106496  1 nouveau\n"
)

LSMOD_NVIDIA = (
    "Module                  Size  Used by\n"
    "nvidia_drm             57344  0\n"
    "nvidia_modeset       1179648  1 nvidia_drm\n"
    "nvidia              35319808  1 nvidia_modeset\n"
)

LSMOD_EMPTY = "Module                  Size  Used by\nloop                   28672  0\n"


class FakeRunner:
    """Stands in for CommandRunner: records every call and answers from a table.

    ``responses`` maps either the full argument tuple or just the program
    name to a CommandResult, or to a callable taking the args and returning
    one. Anything unlisted exits 0 with no output.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def run(self, cmd, capture_output=True, env=None, timeout=None):
        args = tuple(str(part) for part in cmd)
        self.calls.append(args)
        for key in (args, args[0]):
            if key in self.responses:
                response = self.responses[key]
                if callable(response):
                    return response(args)
                return CommandResult(args, response.returncode, response.stdout, response.stderr)
        return CommandResult(args, 0)

    def programs(self):
        return [call[0] for call in self.calls]

    def ran(self, program):
        return program in self.programs()


def result(returncode=0, stdout="", stderr=""):
    return CommandResult((), returncode, stdout, stderr)


def lspci_responses(listing=LSPCI_GPU, classes=None):
    """Responses for the two-pass lspci scan.

    ``classes`` maps bus address to its numeric class code.
    """
    classes = {"00:02.0": "0300", "01:00.0": "0300", "01:00.1": "0403"} if classes is None else classes
    responses = {("lspci",): result(stdout=listing)}
    for address, code in classes.items():
        responses[("lspci", "-n", "-s", address)] = result(
            stdout=f"{address} {code}: 10de:1c82 (rev a1)\n"
        )
    return responses


def write_release_files(root: Path, files: dict[str, str]) -> Path:
    """Create etc/ release files under ``root`` for identify_host()."""
    etc = root / "etc"
    etc.mkdir(parents=True, exist_ok=True)
    for name, content in files.items():
        (etc / name).write_text(content)
    return root


@pytest.fixture(autouse=True)
def _no_log_file():
    """Never let a test leave the install log pointed at a real path."""
    install_logging.set_log_file(None)
    yield
    install_logging.set_log_file(None)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def log_file(tmp_path):
    """Route the install log to a temp file for the duration of a test."""
    path = tmp_path / "nvidia_install.log"
    install_logging.set_log_file(path)
    yield path
    install_logging.set_log_file(None)


@pytest.fixture
def config(tmp_path):
    downloads = tmp_path / "downloads"
    downloads.mkdir()
    boot = tmp_path / "boot"
    boot.mkdir()
    return InstallerConfig(
        log_file=str(tmp_path / "nvidia_install.log"),
        marker_path=str(tmp_path / "modprobe.d" / "blacklist-nouveau.conf"),
        download_dir=str(downloads),
        boot_dir=str(boot),
        confirm_timeout=0,
    )
