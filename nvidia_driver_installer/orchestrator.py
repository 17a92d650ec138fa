"""Two-phase install procedure spanning a reboot

Phase one prepares the host (dependencies, nouveau blacklist, boot image)
and asks for a reboot. Phase two, started by the operator with --cont after
the reboot, installs and verifies the driver. Nothing is written down
between the phases: each one re-probes the host, so re-running after fixing
a failure is always safe.
"""

from enum import Enum

from .errors import (
    HostQueryFailure,
    InstallerError,
    MissingHardware,
    OperatorAbort,
    UnsupportedEnvironment,
)
from .nvidia.blacklist import suppress_conflicting_driver
from .nvidia.drivers import download_driver, make_executable, run_installer, verify_driver
from .nvidia.version import VersionResolver, fetch_url_text
from .outcome import InstallOutcome, OutcomeStatus
from .system.boot_image import regenerate_boot_image
from .system.dependencies import install_prerequisites
from .system.environment import Distribution, identify_host
from .system.hardware import ProbeStatus, scan_hardware, scan_loaded_drivers
from .utils.logging import log_error, log_info, log_step, log_success, log_warn
from .utils.prompts import prompt_timed_continue

SUPPORTED_DISTRIBUTIONS = (Distribution.RHEL, Distribution.UBUNTU, Distribution.FEDORA)


class PhaseState(Enum):
    NOT_STARTED = "not_started"
    PHASE1_RUNNING = "phase1_running"
    AWAITING_REBOOT = "awaiting_reboot"
    PHASE2_RUNNING = "phase2_running"
    DONE = "done"
    BLOCKED = "blocked"
    FAILED = "failed"


_TRANSITIONS: dict[PhaseState, set[PhaseState]] = {
    PhaseState.NOT_STARTED: {PhaseState.PHASE1_RUNNING, PhaseState.AWAITING_REBOOT},
    PhaseState.PHASE1_RUNNING: {PhaseState.AWAITING_REBOOT, PhaseState.BLOCKED, PhaseState.FAILED},
    PhaseState.AWAITING_REBOOT: {PhaseState.PHASE2_RUNNING},
    PhaseState.PHASE2_RUNNING: {PhaseState.DONE, PhaseState.BLOCKED, PhaseState.FAILED},
    PhaseState.DONE: set(),
    PhaseState.BLOCKED: set(),
    PhaseState.FAILED: set(),
}


class PhaseOrchestrator:
    """Sequences the two install phases and enforces their preconditions.

    Every collaborator that touches the host is injectable: ``runner`` for
    external commands, ``confirm`` for the timed prompt, ``fetch_page`` for
    the version lookup and ``host_root`` for release-file detection.
    """

    def __init__(self, config, runner, confirm=prompt_timed_continue,
                 fetch_page=fetch_url_text, host_root="/", prog="nvidia-driver-installer",
                 kernel_release=None):
        self.config = config
        self.runner = runner
        self.confirm = confirm
        self.host_root = host_root
        self.prog = prog
        self.kernel_release = kernel_release
        self.resolver = VersionResolver(
            fetch_page,
            page_url=config.drivers_page_url,
            label=config.version_label,
            timeout=config.fetch_timeout,
        )
        self.state = PhaseState.NOT_STARTED

    # -- state machine -------------------------------------------------

    def _transition(self, new_state: PhaseState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal phase transition {self.state.name} -> {new_state.name}")
        self.state = new_state

    def _halt(self, error: InstallerError) -> InstallOutcome:
        outcome = error.to_outcome()
        if outcome.status is OutcomeStatus.BLOCKED:
            log_warn(error.message)
            log_warn(error.remediation)
            self._transition(PhaseState.BLOCKED)
        else:
            log_error(error.message)
            log_error(error.remediation)
            self._transition(PhaseState.FAILED)
        return outcome

    def _halt_outcome(self, outcome: InstallOutcome) -> InstallOutcome:
        if outcome.error is not None:
            return self._halt(outcome.error)
        log_error(outcome.message)
        self._transition(PhaseState.FAILED)
        return outcome

    def run(self, continuation: bool = False) -> InstallOutcome:
        if continuation:
            return self.run_phase2()
        return self.run_phase1()

    # -- phase 1 -------------------------------------------------------

    def run_phase1(self) -> InstallOutcome:
        self._transition(PhaseState.PHASE1_RUNNING)
        log_step("starting Nvidia drivers install script")
        try:
            return self._phase1()
        except InstallerError as err:
            return self._halt(err)

    def _phase1(self) -> InstallOutcome:
        profile = identify_host(self.host_root)
        log_info(f"Identified OS distribution: {profile.label}")

        if profile.distribution not in SUPPORTED_DISTRIBUTIONS:
            supported = " ".join(d.value for d in SUPPORTED_DISTRIBUTIONS)
            raise UnsupportedEnvironment(
                f"Currently supporting only the following OS: {supported}. "
                f"Your OS distribution is: {profile.distribution.value}"
            )

        inventory = scan_hardware(self.runner)
        if inventory.status is ProbeStatus.QUERY_FAILED:
            raise HostQueryFailure("Unable to enumerate PCI devices with 'lspci'",
                                   remediation="Install pciutils and run again")
        if inventory.is_empty:
            raise MissingHardware("exiting script since Nvidia device is not found")

        drivers = self._probe_drivers()
        if drivers.target_driver_loaded:
            log_info("Found Nvidia drivers. If you need to upgrade, you should first remove the old drivers !")
            if not self.confirm("Nvidia driver is already loaded.", self.config.confirm_timeout):
                raise OperatorAbort("Install interrupted by operator")

        if drivers.conflicting_driver_loaded:
            log_info("Found nouveau drivers as follows:")
            for module in drivers.conflicting_driver_modules:
                log_info(f"      {module}")

        outcome = install_prerequisites(profile, self.runner)
        if not outcome.ok:
            return self._halt_outcome(outcome)

        outcome = suppress_conflicting_driver(self.config.marker_path)
        if not outcome.ok:
            return self._halt_outcome(outcome)

        regen = regenerate_boot_image(profile, self.runner, boot_dir=self.config.boot_dir,
                                      kernel_release=self.kernel_release)

        # The blacklist is in place either way; the reboot is still the next step
        self._transition(PhaseState.AWAITING_REBOOT)
        if not regen.ok:
            log_error(regen.message)
            log_error(regen.error.remediation)
            return regen

        log_info("action completed successfully")
        log_success(f"Please reboot the system and run \"{self.prog} --cont\" "
                    f"to continue this install procedure")
        return InstallOutcome.success("awaiting reboot")

    # -- phase 2 -------------------------------------------------------

    def run_phase2(self) -> InstallOutcome:
        # Only the operator's --cont says the reboot happened
        if self.state is PhaseState.NOT_STARTED:
            self._transition(PhaseState.AWAITING_REBOOT)
        self._transition(PhaseState.PHASE2_RUNNING)
        log_step("continuing Nvidia drivers install after reboot")
        try:
            return self._phase2()
        except InstallerError as err:
            return self._halt(err)

    def _phase2(self) -> InstallOutcome:
        drivers = self._probe_drivers()

        if drivers.target_driver_loaded:
            log_warn("Found Nvidia drivers. If you need to upgrade, you should first remove the old drivers !")
            log_warn("Skipping Nvidia's latest drivers install")
        else:
            version = self.resolver.resolve(self.config.driver_version)
            path = download_driver(version, self.runner, self.config.download_dir,
                                   self.config.download_url_template)
            make_executable(path)
            run_installer(path, self.runner)

        verify_driver(self.runner)

        self._transition(PhaseState.DONE)
        log_success("install procedure completed successfully.")
        log_info("It is suggested to confirm again by rebooting and running 'nvidia-smi' once again")
        return InstallOutcome.success("driver installed and verified")

    # -- helpers -------------------------------------------------------

    def _probe_drivers(self):
        drivers = scan_loaded_drivers(self.runner)
        if drivers.status is ProbeStatus.QUERY_FAILED:
            raise HostQueryFailure("Unable to read the kernel module list with 'lsmod'",
                                   remediation="Install kmod and run again")
        return drivers
