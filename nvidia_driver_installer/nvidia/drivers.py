"""NVIDIA .run driver download, install and verification"""

import os
import stat

from ..config import DOWNLOAD_URL_TEMPLATE
from ..errors import DriverDownloadFailure, DriverInstallFailure, DriverVerificationFailure
from ..utils.logging import log_info, log_step

# --dkms registers the kernel module so it is rebuilt for future kernels,
# -s runs the installer silently (no curses UI, accept defaults)
INSTALLER_FLAGS = ("--dkms", "-s")


def driver_download_url(version: str, template: str = DOWNLOAD_URL_TEMPLATE) -> str:
    return template.format(version=version)


def download_driver(version, runner, download_dir="/tmp", template=DOWNLOAD_URL_TEMPLATE) -> str:
    """Fetch the installer for ``version`` and return its local path."""
    url = driver_download_url(version, template)
    path = os.path.join(download_dir, os.path.basename(url))

    log_step(f"Downloading Nvidia drivers ver {version}")
    result = runner.run(["wget", url, "--output-document", path], capture_output=False)
    if not result.ok or not os.path.isfile(path):
        raise DriverDownloadFailure(f"Unable to download file from {url}",
                                    exit_code=result.returncode)
    return path


def make_executable(path: str) -> None:
    """chmod a+x"""
    try:
        mode = os.stat(path).st_mode
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise DriverDownloadFailure(f"Unable to mark {path} executable: {exc}") from exc


def run_installer(path, runner) -> None:
    """Run the vendor installer unattended; its exit code is all we trust."""
    name = os.path.basename(path)
    result = runner.run([path, *INSTALLER_FLAGS], capture_output=False)
    log_info(f"'{name}' completed with error code: {result.returncode}")
    if not result.ok:
        raise DriverInstallFailure(f"Issue found while running {name} from Nvidia",
                                   exit_code=result.returncode)


def verify_driver(runner) -> None:
    """Run nvidia-smi; a clean install that nvidia-smi cannot talk to still fails."""
    log_info("Will now run 'nvidia-smi' to verify drivers installed correctly")
    result = runner.run(["nvidia-smi"], capture_output=False)
    log_info(f"'nvidia-smi' completed with error code: {result.returncode}")
    if not result.ok:
        raise DriverVerificationFailure("Issue found while running 'nvidia-smi' from Nvidia",
                                        exit_code=result.returncode)
