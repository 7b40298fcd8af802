"""Execution DTOs."""

from dataclasses import asdict, dataclass
from enum import Enum


class ExecutionOutcome(str, Enum):
    """Result of one (trade, relationship) attempt as seen by the handler."""

    DUPLICATE = "duplicate"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ProcessingSummary:
    trades_processed: int = 0
    executions_attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    duplicates: int = 0
    stale_reaped: int = 0

    def record(self, outcome: ExecutionOutcome) -> None:
        if outcome is ExecutionOutcome.DUPLICATE:
            self.duplicates += 1
            return
        self.executions_attempted += 1
        if outcome is ExecutionOutcome.SUCCEEDED:
            self.succeeded += 1
        elif outcome is ExecutionOutcome.FAILED:
            self.failed += 1
        else:
            self.skipped += 1

    def to_dict(self) -> dict:
        return asdict(self)
