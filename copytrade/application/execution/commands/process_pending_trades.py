"""ProcessPendingTrades Command - один прохід Copy Execution Engine."""

from dataclasses import dataclass

from copytrade.application.shared import Command


@dataclass(frozen=True)
class ProcessPendingTradesCommand(Command):
    """Fan out every unprocessed leader trade to its active followers.

    Example:
        >>> summary = await handler.handle(ProcessPendingTradesCommand(limit=100))
        >>> summary.succeeded, summary.skipped
        (3, 1)
    """

    limit: int | None = None
    """Max leader trades per invocation (None = всі)."""
