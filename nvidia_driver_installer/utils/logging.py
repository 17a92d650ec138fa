"""Logging utilities for the NVIDIA driver installer

Every message goes to stderr in color and, once ``set_log_file`` has been
called, is appended to the install log as::

    YYYY-MM-DD_HH:MM:SS - LEVEL: message
"""

import sys
from datetime import datetime


TIMESTAMP_FORMAT = "%Y-%m-%d_%H:%M:%S"

_log_file = None


class Colors:
    """ANSI color codes for terminal output"""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[1;31m'
    GREEN = '\033[1;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[1;34m'
    CYAN = '\033[1;36m'


def set_log_file(path):
    """Append all subsequent log lines to ``path`` (None disables the file sink)."""
    global _log_file
    _log_file = str(path) if path else None


def get_log_file():
    """Return the active log file path, or None."""
    return _log_file


def format_line(level: str, message: str, now: datetime | None = None) -> str:
    """Render one log line in the install-log format."""
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{stamp} - {level}: {message}"


def _write_file(lines: list[str]) -> None:
    global _log_file
    if not _log_file:
        return
    try:
        with open(_log_file, "a") as fh:
            for line in lines:
                fh.write(line + "\n")
    except OSError as exc:
        path, _log_file = _log_file, None
        print(f"{Colors.YELLOW}[WARN]  Cannot write log file {path}: {exc}{Colors.RESET}",
              file=sys.stderr)


def _emit(level: str, color: str, message) -> None:
    # One record per line so the log stays grep-friendly
    lines = [format_line(level, part) for part in str(message).splitlines() or [""]]
    for line in lines:
        print(f"{color}{line}{Colors.RESET}", file=sys.stderr)
    _write_file(lines)


def log_info(message):
    """Log info message in green"""
    _emit("INFO", Colors.GREEN, message)


def log_warn(message):
    """Log warning message in yellow"""
    _emit("WARN", Colors.YELLOW, message)


def log_error(message):
    """Log error message in red"""
    _emit("ERROR", Colors.RED, message)


def log_prompt(message):
    """Log prompt message in cyan (console only, no newline)"""
    print(f"{Colors.CYAN}[INPUT] {message}{Colors.RESET}", end='', file=sys.stderr, flush=True)


def log_step(message):
    """Log step message in blue with newline before"""
    print(file=sys.stderr)
    _emit("INFO", Colors.BLUE, message)


def log_success(message):
    """Log success message in bold green"""
    _emit("INFO", Colors.BOLD + Colors.GREEN, message)
