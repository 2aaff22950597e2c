"""Models for reduced per-case outcomes."""

from dataclasses import dataclass
from enum import StrEnum


class OutcomeStatus(StrEnum):
    """Local verdict for a case identifier."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, kw_only=True)
class OutcomeRecord:
    """Reduced outcome for a single case identifier.

    The message is empty unless the status is failed.
    """

    status: OutcomeStatus = OutcomeStatus.PASSED
    message: str = ""
    elapsed: float = 0.0
