"""PollLeaders Command - один цикл Trade Detector."""

from dataclasses import dataclass

from copytrade.application.shared import Command


@dataclass(frozen=True)
class PollLeadersCommand(Command):
    """Poll every leader account once and persist detected trades.

    Example:
        >>> summary = await handler.handle(PollLeadersCommand())
        >>> summary.trades_detected
        2
    """

    leader_id: int | None = None
    """Обмежити цикл одним leader'ом (None = всі leaders)."""
