"""Base AggregateRoot class.

AggregateRoot - entity, через яку йдуть всі зміни aggregate і яка
накопичує domain events до моменту commit.
"""

from typing import List

from .domain_event import DomainEvent
from .entity import Entity


class AggregateRoot(Entity):
    """Base class for aggregate roots.

    Events не публікуються одразу: application handler забирає їх після
    успішного commit і передає в EventBus.

    Example:
        >>> execution.mark_succeeded(order)
        >>> await uow.commit()
        >>> await event_bus.publish_all(execution.get_domain_events())
        >>> execution.clear_domain_events()
    """

    def __init__(self, id: int | None = None) -> None:
        super().__init__(id)
        self._domain_events: List[DomainEvent] = []

    def add_domain_event(self, event: DomainEvent) -> None:
        """Record an event to be published after commit.

        Args:
            event: Domain event to add.
        """
        self._domain_events.append(event)

    def get_domain_events(self) -> List[DomainEvent]:
        """Get pending domain events (copy)."""
        return self._domain_events.copy()

    def clear_domain_events(self) -> None:
        """Forget pending events once they have been published."""
        self._domain_events.clear()

    @property
    def has_domain_events(self) -> bool:
        return len(self._domain_events) > 0
