"""Interactive prompt utilities"""

import select
import sys

from .logging import log_prompt, log_info


def prompt_timed_continue(message, timeout=30, stream=None):
    """
    Bounded-wait confirmation prompt

    Waits up to ``timeout`` seconds for the operator. Hitting <ENTER> or
    letting the timer run out both continue; answering 'n' or 'q' aborts.
    <ctrl>C raises KeyboardInterrupt to the caller as usual.

    Args:
        message: Text shown before the countdown
        timeout: Seconds to wait before continuing on its own
        stream: Input stream (defaults to sys.stdin)

    Returns:
        bool: True to continue, False if the operator asked to abort
    """
    stream = stream or sys.stdin
    log_prompt(f"{message} Hit <ctrl>C or type 'q' to interrupt. "
               f"Wait {timeout} seconds or hit <ENTER> to continue: ")

    try:
        ready, _, _ = select.select([stream], [], [], timeout)
    except (OSError, ValueError):
        # stdin is not selectable (closed or redirected from nowhere)
        ready = []

    if not ready:
        print(file=sys.stderr)
        log_info(f"No answer after {timeout} seconds, continuing")
        return True

    response = stream.readline().strip().lower()
    if response in ('n', 'no', 'q', 'quit'):
        return False
    return True
