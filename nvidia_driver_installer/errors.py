"""Installer error taxonomy

Each error knows whether it blocks (host not eligible, nothing to fix in
the tool) or fails (operator must resolve and re-run), and carries the
remediation text that is logged alongside it.
"""

from typing import Optional

from .outcome import InstallOutcome, OutcomeStatus

RERUN_HINT = "Please resolve and run again"


class InstallerError(Exception):
    """Base class for all installer errors."""

    status = OutcomeStatus.FAILED
    remediation = RERUN_HINT

    def __init__(self, message: str, exit_code: Optional[int] = None,
                 remediation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        if remediation is not None:
            self.remediation = remediation

    def to_outcome(self) -> InstallOutcome:
        if self.status is OutcomeStatus.BLOCKED:
            return InstallOutcome.blocked(self.message, error=self)
        return InstallOutcome.failed(self.message, self.exit_code, error=self)


# -- Blocking conditions ------------------------------------------------

class UnsupportedEnvironment(InstallerError):
    """The OS distribution is not one this tool knows how to provision."""
    status = OutcomeStatus.BLOCKED
    remediation = "Install the driver manually on this distribution"


class MissingHardware(InstallerError):
    """No NVIDIA VGA/3D controller was found. Not an error for GPU-less hosts."""
    status = OutcomeStatus.BLOCKED
    remediation = "Hint: find such devices manually using: 'lspci | grep -i Nvidia'"


class OperatorAbort(InstallerError):
    """The operator declined to continue at the confirmation prompt."""
    status = OutcomeStatus.BLOCKED
    remediation = "Remove the existing NVIDIA driver first if you need to upgrade"


# -- Failures -------------------------------------------------------------

class HostQueryFailure(InstallerError):
    """lspci or lsmod could not be run, so host state is unknown."""


class DependencyInstallFailure(InstallerError):
    pass


class ConflictMitigationFailure(InstallerError):
    pass


class BootImageRegenFailure(InstallerError):
    remediation = ("Please resolve the error manually.\n"
                   "After resolving, please reboot the system and run this script again\n"
                   "to continue this install procedure.")


class DriverDownloadFailure(InstallerError):
    pass


class DriverInstallFailure(InstallerError):
    remediation = "Please resolve manually (see /var/log/nvidia-installer.log)"


class DriverVerificationFailure(InstallerError):
    remediation = "Please resolve manually; the driver was installed but is not operative"


class AmbiguousVersionResolution(InstallerError):
    remediation = ("Please locate manually the needed driver and set NVIDIA_DRIVER_VER accordingly\n"
                   "(for the list of available versions consult: https://www.nvidia.com/en-us/drivers/unix/)")
