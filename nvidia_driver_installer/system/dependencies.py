"""Build prerequisites for the NVIDIA .run installer (dkms, compilers, 32-bit libs)"""

from ..errors import DependencyInstallFailure
from ..outcome import InstallOutcome
from ..utils.logging import log_info, log_warn, log_step
from .environment import Distribution


class PackageManager:
    """Thin wrapper around a distro package manager CLI."""

    name = ""
    env: dict[str, str] = {}

    def __init__(self, runner):
        self.runner = runner

    def install_command(self, packages) -> list[str]:
        return [self.name, "install", "-y", *packages]

    def prepare(self):
        """Hook run before the first install; returns a failed CommandResult or None."""
        return None

    def install(self, *packages):
        failed = self.prepare()
        if failed is not None:
            return failed
        return self.runner.run(self.install_command(packages), capture_output=False,
                               env=self.env or None)


class AptManager(PackageManager):
    """Manages apt operations, refreshing the package index once"""

    name = "apt-get"
    env = {"DEBIAN_FRONTEND": "noninteractive"}

    def __init__(self, runner):
        super().__init__(runner)
        self._update_done = False

    def prepare(self):
        if self._update_done:
            return None
        result = self.runner.run(["apt-get", "update"], capture_output=False, env=self.env)
        if not result.ok:
            return result
        self._update_done = True
        return None


class YumManager(PackageManager):
    name = "yum"


class DnfManager(PackageManager):
    name = "dnf"


# Ordered installs per distribution. On RHEL the second yum run depends on
# the EPEL repository that the first run enables.
# Stock Fedora ships /etc/redhat-release, so identify_host() reports it as
# RHEL and it takes the yum plan. The dnf plan only applies to hosts
# identified as fedora through os-release alone.
PREREQUISITES: dict[Distribution, tuple[type[PackageManager], list[tuple[str, ...]]]] = {
    Distribution.RHEL: (YumManager, [
        ("epel-release", "dkms", "libstdc++.i686"),
        ("dkms",),
    ]),
    Distribution.UBUNTU: (AptManager, [
        ("build-essential", "gcc-multilib", "dkms"),
        ("curl", "wget"),
    ]),
    Distribution.FEDORA: (DnfManager, [
        ("dkms", "libstdc++.i686", "kernel-devel"),
    ]),
}


def install_prerequisites(profile, runner) -> InstallOutcome:
    """Install the fixed dependency set for the host's distribution.

    Any non-zero exit halts with FAILED; unknown distributions fail straight
    away rather than guessing package names.
    """
    log_step("installing dependencies ...")

    plan = PREREQUISITES.get(profile.distribution)
    if plan is None:
        error = DependencyInstallFailure(
            f"unable to find the dependencies for distro: {profile.distribution.value}"
        )
        return error.to_outcome()

    manager_cls, batches = plan
    manager = manager_cls(runner)
    for packages in batches:
        result = manager.install(*packages)
        if not result.ok:
            log_warn("'install_prerequisites()' did NOT complete successfully")
            error = DependencyInstallFailure(
                f"'{result.command}' failed with exit code {result.returncode}",
                exit_code=result.returncode,
            )
            return error.to_outcome()

    log_info("'install_prerequisites()' completed successfully")
    return InstallOutcome.success()
