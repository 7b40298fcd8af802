"""Domain Events для copy pipeline."""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.shared import DomainEvent


@dataclass(frozen=True)
class CopyExecutedEvent(DomainEvent):
    """Event: follower's copy filled at the brokerage.

    Subscribers:
    - follower notification "trade executed"
    """

    execution_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    quantity: Decimal
    executed_price: Decimal
    brokerage_order_id: str


@dataclass(frozen=True)
class CopyFailedEvent(DomainEvent):
    """Event: follower's copy failed (impact rejected, order rejected, timeout)."""

    execution_id: int
    follower_id: int
    leader_id: int
    symbol: str
    side: str
    reason: str


@dataclass(frozen=True)
class PositionClosedEvent(DomainEvent):
    """Event: позиція закрита по stop-loss / take-profit / виходу лідера."""

    position_id: int
    owner_id: int
    symbol: str
    quantity: Decimal
    exit_price: Decimal
    exit_reason: str
    realized_pnl: Decimal
