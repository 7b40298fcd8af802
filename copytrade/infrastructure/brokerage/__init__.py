"""Brokerage infrastructure - SnapTrade REST adapter, retry, circuit breaker."""

from .circuit_breaker import CircuitBreaker, CircuitState
from .retry import TRANSIENT_ERRORS, retry_with_backoff
from .snaptrade_adapter import SnapTradeBrokerageAdapter, sign_request

__all__ = [
    "CircuitBreaker",
    "CircuitState",
    "SnapTradeBrokerageAdapter",
    "TRANSIENT_ERRORS",
    "retry_with_backoff",
    "sign_request",
]
