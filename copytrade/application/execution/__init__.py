"""Copy Execution Engine use cases."""

from .commands import ProcessPendingTradesCommand
from .copy_executor import CopyExecutor
from .dtos import ExecutionOutcome, ProcessingSummary
from .handlers import ProcessPendingTradesHandler

__all__ = [
    "CopyExecutor",
    "ExecutionOutcome",
    "ProcessPendingTradesCommand",
    "ProcessPendingTradesHandler",
    "ProcessingSummary",
]
