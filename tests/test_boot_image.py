"""Tests for boot image regeneration."""

from conftest import FakeRunner, result
from nvidia_driver_installer.errors import BootImageRegenFailure
from nvidia_driver_installer.outcome import OutcomeStatus
from nvidia_driver_installer.system.boot_image import initramfs_paths, regenerate_boot_image
from nvidia_driver_installer.system.environment import Distribution, HostProfile

RELEASE = "3.10.0-1160.el7.x86_64"


def test_rhel_backs_up_then_runs_dracut(tmp_path):
    image = tmp_path / f"initramfs-{RELEASE}.img"
    image.write_bytes(b"initramfs")
    runner = FakeRunner()

    outcome = regenerate_boot_image(HostProfile(Distribution.RHEL, "7"), runner,
                                    boot_dir=str(tmp_path), kernel_release=RELEASE)

    assert outcome.ok
    assert runner.calls == [("dracut", "--force")]
    assert (tmp_path / f"initramfs-{RELEASE}-nouveau.img").read_bytes() == b"initramfs"


def test_missing_image_still_regenerates(tmp_path, log_file):
    runner = FakeRunner()

    outcome = regenerate_boot_image(HostProfile(Distribution.RHEL, "8"), runner,
                                    boot_dir=str(tmp_path), kernel_release=RELEASE)

    assert outcome.ok
    assert runner.ran("dracut")
    assert "WARN: Could not back up" in log_file.read_text()


def test_dracut_failure(tmp_path):
    runner = FakeRunner({"dracut": result(returncode=1)})

    outcome = regenerate_boot_image(HostProfile(Distribution.RHEL, "7"), runner,
                                    boot_dir=str(tmp_path), kernel_release=RELEASE)

    assert outcome.status is OutcomeStatus.FAILED
    assert outcome.exit_code == 1
    assert isinstance(outcome.error, BootImageRegenFailure)


def test_ubuntu_runs_update_initramfs(tmp_path):
    runner = FakeRunner()

    outcome = regenerate_boot_image(HostProfile(Distribution.UBUNTU, "18.04"), runner,
                                    boot_dir=str(tmp_path), kernel_release=RELEASE)

    assert outcome.ok
    assert runner.calls == [("update-initramfs", "-u")]
    assert list(tmp_path.iterdir()) == []


def test_old_ubuntu_skips_regeneration(tmp_path):
    runner = FakeRunner()

    outcome = regenerate_boot_image(HostProfile(Distribution.UBUNTU, "14.04"), runner,
                                    boot_dir=str(tmp_path), kernel_release=RELEASE)

    assert outcome.ok
    assert runner.calls == []


def test_initramfs_paths():
    current, backup = initramfs_paths("/boot", "5.4.0")

    assert current == "/boot/initramfs-5.4.0.img"
    assert backup == "/boot/initramfs-5.4.0-nouveau.img"
