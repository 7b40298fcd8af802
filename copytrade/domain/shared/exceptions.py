"""Base domain exceptions.

Domain exceptions - порушення бізнес-правил, не технічні помилки.
Context (ids, статуси) передається keyword-аргументами і потрапляє в лог.
"""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain errors.

    Example:
        >>> raise DomainException("Relationship already stopped", relationship_id=5)
    """

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class BusinessRuleViolation(DomainException):
    """Raised when a business rule is violated."""


class AggregateNotFound(DomainException):
    """Raised when an aggregate cannot be loaded.

    Example:
        >>> raise AggregateNotFound("Leader trade not found", leader_trade_id=42)
    """


class InvalidStateTransition(DomainException):
    """Raised for a forbidden state machine transition.

    Example:
        >>> # CopyExecution SUCCESS -> FAILED
        >>> raise InvalidStateTransition(
        ...     "Execution already terminal",
        ...     from_status="success",
        ...     to_status="failed",
        ... )
    """
