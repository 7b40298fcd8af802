"""Base ValueObject class.

ValueObject - immutable об'єкт без identity, порівнюється за значенням
(BrokerageCredentials, OrderResult, CopyDecision).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True, eq=True)
class ValueObject(ABC):
    """Base class for domain value objects.

    Підкласи валідують себе в ``__post_init__`` і кидають ValueError.

    Example:
        >>> @dataclass(frozen=True)
        ... class ImpactResult(ValueObject):
        ...     trade_id: str
        ...
        ...     def __post_init__(self):
        ...         validate_value_object(bool(self.trade_id), "trade_id is required")
    """

    def __post_init__(self) -> None:
        pass


def validate_value_object(condition: bool, message: str) -> None:
    """Raise ValueError with ``message`` unless ``condition`` holds.

    Example:
        >>> validate_value_object(quantity > 0, "Quantity must be positive")
    """
    if not condition:
        raise ValueError(message)
