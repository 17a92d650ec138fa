"""initramfs regeneration so the nouveau blacklist takes effect on next boot"""

import os
import shutil

from ..errors import BootImageRegenFailure
from ..outcome import InstallOutcome
from ..utils.logging import log_info, log_warn
from ..utils.system import get_kernel_release
from .environment import Distribution

BACKUP_TAG = "nouveau"

# update-initramfs picks up modprobe.d blacklists from Ubuntu 16.04 on
UBUNTU_MIN_MAJOR = 16

DRACUT_DISTRIBUTIONS = (Distribution.RHEL, Distribution.FEDORA)


def initramfs_paths(boot_dir: str, kernel_release: str) -> tuple[str, str]:
    """(current image, backup image) for the given kernel release."""
    current = os.path.join(boot_dir, f"initramfs-{kernel_release}.img")
    backup = os.path.join(boot_dir, f"initramfs-{kernel_release}-{BACKUP_TAG}.img")
    return current, backup


def backup_initramfs(boot_dir: str, kernel_release: str) -> bool:
    """Copy the running kernel's initramfs aside before dracut replaces it."""
    current, backup = initramfs_paths(boot_dir, kernel_release)
    try:
        shutil.copy2(current, backup)
    except OSError as exc:
        log_warn(f"Could not back up {current}: {exc}")
        return False
    log_info(f"Backed up {current} to {backup}")
    return True


def regenerate_boot_image(profile, runner, boot_dir="/boot", kernel_release=None) -> InstallOutcome:
    """Rebuild the boot image with the distro's tool.

    Returns FAILED when the tool exits non-zero; the caller still moves on to
    the reboot step since nothing else in phase one depends on it.
    """
    if profile.distribution in DRACUT_DISTRIBUTIONS:
        backup_initramfs(boot_dir, kernel_release or get_kernel_release())
        tool, cmd = "dracut", ["dracut", "--force"]
    elif profile.distribution is Distribution.UBUNTU:
        major = profile.major_version
        if major is None or major < UBUNTU_MIN_MAJOR:
            log_warn(f"Ubuntu {profile.version_id or '(unknown version)'} is older than "
                     f"{UBUNTU_MIN_MAJOR}.04; skipping 'update-initramfs'")
            return InstallOutcome.success("boot image regeneration skipped")
        tool, cmd = "update-initramfs", ["update-initramfs", "-u"]
    else:
        log_warn(f"No boot image tool known for {profile.distribution.value}; skipping")
        return InstallOutcome.success("boot image regeneration skipped")

    log_info(f"running '{' '.join(cmd)}'")
    result = runner.run(cmd, capture_output=False)
    log_info(f"'{tool}' completed with error code: {result.returncode}")
    if not result.ok:
        error = BootImageRegenFailure(f"'{tool}' failed with error code: {result.returncode}",
                                      exit_code=result.returncode)
        return error.to_outcome()

    log_info(f"'{tool}' completed successfully")
    return InstallOutcome.success()
