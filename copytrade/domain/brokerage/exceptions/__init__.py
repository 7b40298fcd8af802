"""Exceptions для Brokerage bounded context."""

from .brokerage_exceptions import (
    BrokerageAPIError,
    BrokerageConnectionError,
    BrokerageError,
    BrokerageTimeoutError,
    CircuitBreakerOpenError,
    OrderRejectedError,
    RateLimitError,
    SymbolNotFoundError,
    TradeImpactRejectedError,
)

__all__ = [
    "BrokerageAPIError",
    "BrokerageConnectionError",
    "BrokerageError",
    "BrokerageTimeoutError",
    "CircuitBreakerOpenError",
    "OrderRejectedError",
    "RateLimitError",
    "SymbolNotFoundError",
    "TradeImpactRejectedError",
]
