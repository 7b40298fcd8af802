"""NotificationRecorder - EventBus subscriber that writes follower notifications."""

import logging

from copytrade.application.shared import UnitOfWorkFactory
from copytrade.domain.copying.entities import Notification
from copytrade.domain.copying.events import (
    CopyExecutedEvent,
    CopyFailedEvent,
    PositionClosedEvent,
)
from copytrade.domain.copying.value_objects import NotificationKind
from copytrade.infrastructure.messaging import EventBus

logger = logging.getLogger(__name__)


class NotificationRecorder:
    """Turns copy pipeline events into Notification rows.

    Example:
        >>> recorder = NotificationRecorder(uow_factory)
        >>> recorder.register(event_bus)
    """

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def register(self, event_bus: EventBus) -> None:
        event_bus.subscribe(CopyExecutedEvent, self.on_copy_executed)
        event_bus.subscribe(CopyFailedEvent, self.on_copy_failed)
        event_bus.subscribe(PositionClosedEvent, self.on_position_closed)

    async def on_copy_executed(self, event: CopyExecutedEvent) -> None:
        await self._record(
            Notification(
                user_id=event.follower_id,
                kind=NotificationKind.TRADE_EXECUTED,
                title=f"Copied {event.side.upper()} {event.symbol}",
                message=(
                    f"{event.side.upper()} {event.quantity} {event.symbol} "
                    f"@ ${event.executed_price}"
                ),
                payload={
                    "execution_id": event.execution_id,
                    "leader_id": event.leader_id,
                    "order_id": event.brokerage_order_id,
                },
            )
        )

    async def on_copy_failed(self, event: CopyFailedEvent) -> None:
        await self._record(
            Notification(
                user_id=event.follower_id,
                kind=NotificationKind.TRADE_FAILED,
                title=f"Copy of {event.symbol} failed",
                message=event.reason,
                payload={"execution_id": event.execution_id, "leader_id": event.leader_id},
            )
        )

    async def on_position_closed(self, event: PositionClosedEvent) -> None:
        label = event.exit_reason.replace("_", " ")
        await self._record(
            Notification(
                user_id=event.owner_id,
                kind=NotificationKind.POSITION_CLOSED,
                title=f"{event.symbol} closed ({label})",
                message=(
                    f"Sold {event.quantity} {event.symbol} @ ${event.exit_price}, "
                    f"P&L ${event.realized_pnl:.2f}"
                ),
                payload={"position_id": event.position_id, "exit_reason": event.exit_reason},
            )
        )

    async def _record(self, notification: Notification) -> None:
        async with self._uow_factory() as uow:
            await uow.notifications.add(notification)
            await uow.commit()
        logger.debug(
            "notification.recorded",
            extra={"user_id": notification.user_id, "kind": notification.kind.value},
        )
