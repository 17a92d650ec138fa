"""NVIDIA Driver Installer - Command Line Interface

Entry point for the nvidia-driver-installer command and
python3 -m nvidia_driver_installer.

Instructions:
  0. It is assumed that the NVIDIA driver is NOT already installed. If it
     is, remove the old driver manually first.
  1. Log in as root.
  2. Run the installer with no arguments (phase one: dependencies,
     nouveau blacklist, boot image).
  3. Reboot the system when instructed.
  4. Log in as root and run it again with --cont (phase two: download,
     install and verify the driver).

Set NVIDIA_DRIVER_VER to pin a driver version instead of using the latest
long-lived branch.
"""

import os
import sys
import traceback

from nvidia_driver_installer.config import InstallerConfig
from nvidia_driver_installer.orchestrator import PhaseOrchestrator
from nvidia_driver_installer.utils.logging import log_error, log_info, set_log_file
from nvidia_driver_installer.utils.system import CommandRunner

PROG = "nvidia-driver-installer"

USAGE = f"""usage: {PROG} [--cont]

  (no argument)  phase one: prepare the host, then reboot
  --cont         phase two: install and verify the driver after the reboot

environment:
  NVIDIA_DRIVER_VER    driver version to install (default: latest long-lived branch)
  NVIDIA_INSTALL_LOG   install log file (default: nvidia_install.log)
  NVIDIA_DOWNLOAD_DIR  download directory for the installer (default: /tmp)
"""


def parse_phase(argv: list[str]) -> bool | None:
    """Return True for phase two, False for phase one, None for bad usage."""
    if not argv or not argv[0]:
        return False
    # Accept --cont, -cont, --continue, ...
    if "-cont" in argv[0]:
        return True
    return None


def main(argv: list[str] | None = None) -> None:
    """Run one install phase and exit with its status."""
    argv = sys.argv[1:] if argv is None else argv

    if argv and argv[0] in ("-h", "--help"):
        print(USAGE)
        sys.exit(0)

    continuation = parse_phase(argv)
    if continuation is None:
        print(USAGE, file=sys.stderr)
        log_error(f"Unknown argument: {argv[0]}")
        sys.exit(1)

    config = InstallerConfig.from_env()
    set_log_file(config.log_file)

    try:
        if os.geteuid() != 0:
            log_error("This script must be run as root (sudo).")
            sys.exit(1)

        orchestrator = PhaseOrchestrator(config, CommandRunner(), prog=PROG)
        outcome = orchestrator.run(continuation=continuation)
        sys.exit(outcome.process_exit_code)

    except KeyboardInterrupt:
        print(file=sys.stderr)
        log_info("Cancelled.")
        sys.exit(1)
    except Exception as e:
        log_error(f"Installation failed: {str(e)}")
        log_error(f"Traceback: {traceback.format_exc()}")
        sys.exit(1)


if __name__ == "__main__":
    main()
