"""DetectedTrade value object - результат diff двох snapshot'ів."""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.shared import ValueObject, validate_value_object

from .enums import TradeSide


@dataclass(frozen=True)
class DetectedTrade(ValueObject):
    """Buy/sell synthesized from a change in one symbol's quantity.

    Example:
        >>> DetectedTrade(symbol="AAPL", side=TradeSide.SELL,
        ...               quantity=Decimal("100"), is_exit=True)
    """

    symbol: str
    side: TradeSide
    quantity: Decimal
    is_exit: bool = False

    def __post_init__(self) -> None:
        validate_value_object(bool(self.symbol), "Symbol is required")
        validate_value_object(self.quantity > 0, "Quantity must be positive")

    @property
    def signed_delta(self) -> Decimal:
        """Quantity change this trade implies (negative for sells)."""
        return self.quantity if self.side is TradeSide.BUY else -self.quantity
