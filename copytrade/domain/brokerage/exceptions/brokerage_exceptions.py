"""Exceptions для Brokerage bounded context."""

from copytrade.domain.shared import DomainException


class BrokerageError(DomainException):
    """Base exception для всіх brokerage-related errors."""


class BrokerageConnectionError(BrokerageError):
    """Raised коли брокер недоступний (network error). Transient."""


class BrokerageTimeoutError(BrokerageError):
    """Raised коли виклик брокера не вклався в timeout. Transient."""


class BrokerageAPIError(BrokerageError):
    """Raised коли API брокера повернув помилку."""


class RateLimitError(BrokerageError):
    """Raised при перевищенні rate limit. Transient - retry з backoff."""


class SymbolNotFoundError(BrokerageError):
    """Raised коли ticker не знайдений у брокера."""


class TradeImpactRejectedError(BrokerageError):
    """Raised коли impact check відхилив ордер (недостатньо коштів, ринок закритий)."""


class OrderRejectedError(BrokerageError):
    """Raised коли брокер відхилив або скасував ордер."""


class CircuitBreakerOpenError(BrokerageError):
    """Raised коли circuit breaker відкритий (too many failures)."""
