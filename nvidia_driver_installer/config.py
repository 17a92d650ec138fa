"""Installer configuration

Defaults mirror the values the installer has always used; a handful can be
overridden from the environment so the operator never edits code:

    NVIDIA_DRIVER_VER    pin a driver version (empty = find the latest)
    NVIDIA_INSTALL_LOG   path of the append-only install log
    NVIDIA_DOWNLOAD_DIR  where the .run installer is downloaded
"""

import os
from dataclasses import dataclass, replace

DRIVERS_PAGE_URL = "https://www.nvidia.com/en-us/drivers/unix/"
VERSION_LABEL = "Latest Long Lived Branch Version"
DOWNLOAD_URL_TEMPLATE = (
    "https://us.download.nvidia.com/XFree86/Linux-x86_64/"
    "{version}/NVIDIA-Linux-x86_64-{version}.run"
)
BLACKLIST_FILE = "/etc/modprobe.d/blacklist-nouveau.conf"
LOG_FILE = "nvidia_install.log"


@dataclass(frozen=True)
class InstallerConfig:
    # Leave empty to look up the latest long-lived branch. Older boards need
    # a pin, e.g. "GeForce 210" (GT218) only works with "340.108".
    driver_version: str = ""
    log_file: str = LOG_FILE
    marker_path: str = BLACKLIST_FILE
    download_dir: str = "/tmp"
    boot_dir: str = "/boot"
    drivers_page_url: str = DRIVERS_PAGE_URL
    version_label: str = VERSION_LABEL
    download_url_template: str = DOWNLOAD_URL_TEMPLATE
    confirm_timeout: int = 30
    fetch_timeout: int = 15

    @classmethod
    def from_env(cls, environ=None) -> "InstallerConfig":
        environ = os.environ if environ is None else environ
        config = cls()
        overrides = {}
        if environ.get("NVIDIA_DRIVER_VER"):
            overrides["driver_version"] = environ["NVIDIA_DRIVER_VER"].strip()
        if environ.get("NVIDIA_INSTALL_LOG"):
            overrides["log_file"] = environ["NVIDIA_INSTALL_LOG"]
        if environ.get("NVIDIA_DOWNLOAD_DIR"):
            overrides["download_dir"] = environ["NVIDIA_DOWNLOAD_DIR"]
        return replace(config, **overrides)
