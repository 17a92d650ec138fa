"""NVIDIA Driver Installer - Main package

Installs the NVIDIA .run driver on RHEL, Fedora and Ubuntu hosts in two
phases around a reboot: blacklist nouveau and rebuild the boot image first,
then install and verify the driver.
"""

__version__ = "1.0.0"
__package_name__ = "nvidia-driver-installer"
