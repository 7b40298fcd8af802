"""MonitorPositions Handler - Position Risk Monitor entry point."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from copytrade.application.shared import CommandHandler, OrderSubmitter, UnitOfWorkFactory
from copytrade.domain.brokerage.exceptions import BrokerageError
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.copying.entities import Position
from copytrade.domain.copying.exceptions import CredentialsNotConfiguredError
from copytrade.domain.copying.services import should_close_position
from copytrade.domain.copying.value_objects import CloseDecision, TradeSide
from copytrade.infrastructure.encryption import CredentialResolver
from copytrade.infrastructure.messaging import EventBus

from ..commands import MonitorPositionsCommand
from ..dtos import MonitoringSummary

logger = logging.getLogger(__name__)


class MonitorPositionsHandler(CommandHandler[MonitorPositionsCommand, MonitoringSummary]):
    """Close positions whose stop-loss or take-profit has been crossed.

    Кожна позиція перевіряється незалежно: збій закриття однієї
    потрапляє в details, позиція лишається OPEN і буде перевірена
    наступним циклом.

    Перед SELL позиція claim'иться (``positions.claim_close``), тому з
    overlapping runs ордер відправляє лише один. Claim, старший за
    ``claim_ttl_seconds``, вважається покинутим.

    Example:
        >>> summary = await handler.handle(MonitorPositionsCommand())
        >>> summary.details
        [{'symbol': 'AAPL', 'reason': 'stop_loss', 'trigger_price': '95', ...}]
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        brokerage: BrokeragePort,
        credential_resolver: CredentialResolver,
        event_bus: EventBus,
        call_timeout: float,
        claim_ttl_seconds: int = 300,
    ) -> None:
        self._uow_factory = uow_factory
        self._claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self._credentials = credential_resolver
        self._event_bus = event_bus
        self._submitter = OrderSubmitter(brokerage, call_timeout)

    async def handle(self, command: MonitorPositionsCommand) -> MonitoringSummary:
        async with self._uow_factory() as uow:
            positions = await uow.positions.get_open_with_protective_levels()

        summary = MonitoringSummary(checked=len(positions))
        if not positions:
            logger.debug("position_monitor.nothing_to_check")
            return summary

        for position in positions:
            decision = should_close_position(position)
            if not decision.should_close:
                continue

            summary.triggered += 1
            detail = await self._close(position, decision)
            if detail is None:
                summary.skipped += 1
                continue

            summary.details.append(detail)
            if "error" in detail:
                summary.failed += 1
            else:
                summary.closed += 1

        logger.info(
            "position_monitor.completed",
            extra={
                "checked": summary.checked,
                "triggered": summary.triggered,
                "closed": summary.closed,
                "failed": summary.failed,
                "skipped": summary.skipped,
            },
        )
        return summary

    async def _close(self, position: Position, decision: CloseDecision) -> Optional[dict]:
        """Claim, sell and close one position.

        Returns:
            None, якщо позицію вже закриває інший run; інакше detail.
        """
        detail = {
            "position_id": position.id,
            "symbol": position.symbol,
            "reason": decision.reason.value,
        }

        async with self._uow_factory() as uow:
            stale_before = datetime.now(timezone.utc) - self._claim_ttl
            claimed = await uow.positions.claim_close(position.id, stale_before)
            if not claimed:
                logger.info("position_monitor.close_in_progress", extra=detail)
                return None
            owner = await uow.traders.get_by_id(position.owner_id)
            await uow.commit()

        logger.info(
            "position_monitor.triggered",
            extra={
                **detail,
                "current_price": str(position.current_price),
                "trigger_price": str(decision.trigger_price),
            },
        )

        try:
            if owner is None:
                raise CredentialsNotConfiguredError(
                    "Position owner not found", trader_id=position.owner_id
                )
            credentials = self._credentials.resolve(owner)
            fill = await self._submitter.submit(
                credentials,
                position.account_id,
                TradeSide.SELL.brokerage_action,
                position.symbol,
                abs(position.quantity),
                fallback_price=position.current_price,
            )
        except (BrokerageError, CredentialsNotConfiguredError) as e:
            logger.error(
                "position_monitor.close_failed",
                extra={**detail, "error": str(e)},
            )
            async with self._uow_factory() as uow:
                await uow.positions.release_close(position.id)
                await uow.commit()
            return {**detail, "error": str(e)}

        async with self._uow_factory() as uow:
            position.close(decision.reason, fill.executed_price)
            await uow.positions.save(position)
            await uow.commit()

        await self._event_bus.publish_all(position.get_domain_events())
        return {
            **detail,
            "trigger_price": str(decision.trigger_price),
            "executed_price": str(fill.executed_price),
            "order_id": fill.order_id,
        }
