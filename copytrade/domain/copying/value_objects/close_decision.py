"""CloseDecision value object - результат перевірки SL/TP."""

from dataclasses import dataclass
from decimal import Decimal

from copytrade.domain.shared import ValueObject

from .enums import ExitReason


@dataclass(frozen=True)
class CloseDecision(ValueObject):
    should_close: bool
    reason: ExitReason | None = None
    trigger_price: Decimal | None = None

    @classmethod
    def hold(cls) -> "CloseDecision":
        return cls(should_close=False)
