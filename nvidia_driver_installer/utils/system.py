"""System utilities for command execution

All external programs (package managers, lspci, lsmod, dracut, wget, the
NVIDIA installer, nvidia-smi) are started through ``CommandRunner.run`` so
that callers only ever see a ``CommandResult`` and tests can swap in a fake.
"""

import os
import shlex
import subprocess
from dataclasses import dataclass

from .logging import log_info, log_error

# Exit codes used when the command could not be run at all (shell conventions)
EXIT_NOT_FOUND = 127
EXIT_TIMEOUT = 124


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of one external command."""
    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return shlex.join(self.args)


class CommandRunner:
    """Runs external commands synchronously and reports their outcome."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def run(self, cmd, capture_output=True, env=None, timeout=None) -> CommandResult:
        """
        Execute a command and wait for it to exit

        Args:
            cmd: Command as a list of arguments (never passed through a shell)
            capture_output: Capture stdout/stderr instead of streaming them
                to the terminal (installers stream so progress stays visible)
            env: Extra environment variables merged over os.environ
            timeout: Seconds before the command is abandoned

        Returns:
            CommandResult; a missing binary or a timeout is reported through
            ``returncode`` rather than raised
        """
        args = tuple(str(part) for part in cmd)
        if not self.quiet:
            log_info(f"Running: {shlex.join(args)}")

        full_env = None
        if env:
            full_env = os.environ.copy()
            full_env.update(env)

        try:
            proc = subprocess.run(
                args,
                capture_output=capture_output,
                text=True,
                env=full_env,
                timeout=timeout,
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError:
            log_error(f"Command not found: {args[0]}")
            return CommandResult(args, EXIT_NOT_FOUND, "", f"{args[0]}: command not found")
        except subprocess.TimeoutExpired:
            log_error(f"Command timed out after {timeout}s: {shlex.join(args)}")
            return CommandResult(args, EXIT_TIMEOUT, "", "timed out")
        except PermissionError as exc:
            log_error(f"Command not executable: {args[0]} ({exc})")
            return CommandResult(args, 126, "", str(exc))

        return CommandResult(args, proc.returncode, proc.stdout or "", proc.stderr or "")


def get_kernel_release() -> str:
    """Release string of the running kernel (same as ``uname -r``)."""
    return os.uname().release
