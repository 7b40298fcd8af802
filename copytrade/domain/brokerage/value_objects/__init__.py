"""Value Objects для Brokerage bounded context."""

from .brokerage_values import (
    AccountBalance,
    BrokerageCredentials,
    ImpactResult,
    OrderResult,
    OrderStatus,
    RawPosition,
    SymbolMatch,
)

__all__ = [
    "AccountBalance",
    "BrokerageCredentials",
    "ImpactResult",
    "OrderResult",
    "OrderStatus",
    "RawPosition",
    "SymbolMatch",
]
