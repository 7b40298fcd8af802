"""Base DomainEvent class.

DomainEvent - факт, що вже стався в domain (CopyExecuted, PositionClosed).
Handlers підписуються через EventBus; domain не знає хто їх обробляє.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True)
class DomainEvent(ABC):
    """Base class for all domain events.

    Events immutable, іменуються в минулому часі і несуть всі дані,
    потрібні subscriber'у без додаткових запитів до БД.

    Example:
        >>> @dataclass(frozen=True)
        ... class CopyExecutedEvent(DomainEvent):
        ...     execution_id: int
        ...     follower_id: int
        ...     symbol: str
    """

    event_id: UUID = field(default_factory=uuid4, init=False)
    occurred_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), init=False
    )

    @property
    def event_name(self) -> str:
        return self.__class__.__name__

    def __repr__(self) -> str:
        return f"{self.event_name}(event_id={self.event_id}, occurred_at={self.occurred_at})"
