"""Terminal status of an install phase or step"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeStatus(Enum):
    """How a phase (or a step within it) ended."""
    SUCCESS = "success"
    BLOCKED = "blocked"
    FAILED = "failed"


@dataclass(frozen=True)
class InstallOutcome:
    """Result of a phase or step.

    BLOCKED means the host is not eligible (unsupported OS, no GPU) and is a
    graceful exit. FAILED means something went wrong that the operator has
    to resolve before running again.
    """
    status: OutcomeStatus
    message: str = ""
    exit_code: Optional[int] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, message: str = "") -> "InstallOutcome":
        return cls(OutcomeStatus.SUCCESS, message)

    @classmethod
    def blocked(cls, message: str, error: Optional[Exception] = None) -> "InstallOutcome":
        return cls(OutcomeStatus.BLOCKED, message, error=error)

    @classmethod
    def failed(cls, message: str, exit_code: Optional[int] = None,
               error: Optional[Exception] = None) -> "InstallOutcome":
        return cls(OutcomeStatus.FAILED, message, exit_code, error)

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    @property
    def process_exit_code(self) -> int:
        """Exit status for the whole process: only FAILED is non-zero."""
        return 1 if self.status is OutcomeStatus.FAILED else 0
