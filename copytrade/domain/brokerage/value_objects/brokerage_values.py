"""Normalized brokerage responses.

Adapter на I/O boundary перетворює wire-format брокера на ці value objects,
щоб diff/sizing/execution логіка не залежала від JSON payloads.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from copytrade.domain.shared import ValueObject, validate_value_object


@dataclass(frozen=True)
class BrokerageCredentials(ValueObject):
    """Opaque (user id, user secret) pair; the core never interprets it."""

    user_id: str
    user_secret: str

    def __post_init__(self) -> None:
        validate_value_object(bool(self.user_id), "Brokerage user id is required")
        validate_value_object(bool(self.user_secret), "Brokerage user secret is required")

    def __repr__(self) -> str:
        return f"BrokerageCredentials(user_id={self.user_id!r}, user_secret='***')"


@dataclass(frozen=True)
class RawPosition(ValueObject):
    """One position line as reported by the brokerage.

    ``units`` та ``quantity`` - різні назви поля у різних брокерів;
    normalize_positions бере ``units``, потім ``quantity``, потім 0.
    """

    symbol: Optional[str]
    units: Optional[Decimal] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    average_purchase_price: Optional[Decimal] = None


@dataclass(frozen=True)
class AccountBalance(ValueObject):
    total_value: Decimal
    cash: Decimal = Decimal("0")
    currency: str = "USD"


@dataclass(frozen=True)
class SymbolMatch(ValueObject):
    """Result of a symbol search: brokerage-side id for a ticker."""

    symbol: str
    universal_symbol_id: str
    description: str = ""


@dataclass(frozen=True)
class ImpactResult(ValueObject):
    """Validated, priced order awaiting submission.

    ``trade_id`` - reference, яку треба передати в place_order (живе ~5 хв).
    """

    trade_id: str
    estimated_price: Optional[Decimal] = None
    estimated_commission: Decimal = Decimal("0")
    remaining_cash: Optional[Decimal] = None

    def __post_init__(self) -> None:
        validate_value_object(bool(self.trade_id), "Impact result requires trade_id")


class OrderStatus(str, Enum):
    """Status ордеру у брокера."""

    EXECUTED = "executed"
    PARTIAL = "partial"
    ACCEPTED = "accepted"
    PENDING = "pending"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_rejected(self) -> bool:
        return self in (OrderStatus.REJECTED, OrderStatus.CANCELLED, OrderStatus.FAILED)


@dataclass(frozen=True)
class OrderResult(ValueObject):
    """Confirmation of a submitted order.

    Example:
        >>> OrderResult(order_id="ORD-1", status=OrderStatus.EXECUTED,
        ...             executed_price=Decimal("50.02"), filled_quantity=Decimal("40"))
    """

    order_id: str
    status: OrderStatus
    executed_price: Optional[Decimal] = None
    filled_quantity: Optional[Decimal] = None

    def __post_init__(self) -> None:
        validate_value_object(bool(self.order_id), "Order result requires order_id")
        if self.executed_price is not None:
            validate_value_object(
                self.executed_price > Decimal("0"), "Executed price must be positive"
            )
