"""Event Bus - in-process delivery of domain events.

- Aggregates emit events (CopyExecuted, CopyFailed, PositionClosed)
- Application handlers publish them after commit
- Subscribers (notifications) працюють незалежно від pipeline
"""

import logging
from collections import defaultdict
from typing import Awaitable, Callable, Iterable, Type

from copytrade.domain.shared import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBus:
    """Event Bus для domain events.

    Помилка subscriber'а логиться і не зупиняє інших subscribers та
    pipeline: ордер вже виконано, нотифікація - best effort.

    Example:
        >>> event_bus = EventBus()
        >>> event_bus.subscribe(CopyExecutedEvent, notifier.on_copy_executed)
        >>> await event_bus.publish_all(execution.get_domain_events())
    """

    def __init__(self) -> None:
        self._subscribers: dict[Type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        self._subscribers[event_type].append(handler)
        logger.debug(
            "event_bus.subscription_added",
            extra={"event_type": event_type.__name__, "handler": _name(handler)},
        )

    def unsubscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        if handler in self._subscribers[event_type]:
            self._subscribers[event_type].remove(handler)

    async def publish(self, event: DomainEvent) -> None:
        """Publish single domain event to every handler of its type."""
        event_type = type(event)
        handlers = list(self._subscribers.get(event_type, []))

        if not handlers:
            logger.debug("event_bus.no_subscribers", extra={"event_type": event_type.__name__})
            return

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                logger.error(
                    "event_bus.handler_failed",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": _name(handler),
                        "event_id": str(event.event_id),
                        "error": str(e),
                    },
                    exc_info=True,
                )

    async def publish_all(self, events: Iterable[DomainEvent]) -> None:
        for event in events:
            await self.publish(event)

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers.clear()

    def get_subscribers_count(self, event_type: Type[DomainEvent]) -> int:
        return len(self._subscribers.get(event_type, []))


def _name(handler: EventHandler) -> str:
    return getattr(handler, "__qualname__", repr(handler))
