"""Value objects produced and consumed by the copy policy evaluator."""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.shared import ValueObject, validate_value_object

from .enums import SkipReason


@dataclass(frozen=True)
class PolicyContext(ValueObject):
    """Everything the evaluator needs besides the trade and relationship.

    Збирається execution engine'ом з brokerage та БД перед evaluate(),
    щоб сам evaluator лишався pure функцією.
    """

    follower_portfolio_value: Decimal = Decimal("0")
    leader_portfolio_value: Decimal = Decimal("0")
    trade_price: Decimal | None = None
    has_active_connection: bool = True
    follower_return_percent: Decimal | None = None
    open_positions_count: int = 0
    trades_copied_today: int = 0
    volume_copied_today: Decimal = Decimal("0")
    held_quantity: Decimal = Decimal("0")


@dataclass(frozen=True)
class ProtectiveLevels(ValueObject):
    stop_loss: Decimal | None = None
    take_profit: Decimal | None = None


@dataclass(frozen=True)
class CopyDecision(ValueObject):
    """Outcome of evaluating one (leader trade, relationship) pair.

    Example:
        >>> decision = evaluator.evaluate(trade, relationship, context)
        >>> if decision.should_copy:
        ...     await place(decision.quantity)
        ... else:
        ...     execution.mark_skipped(decision.reason)
    """

    should_copy: bool
    quantity: Decimal = Decimal("0")
    price: Decimal | None = None
    reason: SkipReason | None = None

    def __post_init__(self) -> None:
        if self.should_copy:
            validate_value_object(self.quantity > 0, "Copy quantity must be positive")
        else:
            validate_value_object(self.reason is not None, "Skip requires a reason")

    @classmethod
    def skip(cls, reason: SkipReason) -> "CopyDecision":
        return cls(should_copy=False, reason=reason)

    @classmethod
    def copy(cls, quantity: Decimal, price: Decimal) -> "CopyDecision":
        return cls(should_copy=True, quantity=quantity, price=price)
