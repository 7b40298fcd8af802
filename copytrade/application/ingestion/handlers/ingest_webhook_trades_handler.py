"""IngestWebhookTrades Handler - push path into the leader trade queue."""

import logging
from datetime import datetime, timedelta, timezone

from copytrade.application.shared import CommandHandler, UnitOfWorkFactory
from copytrade.domain.copying.entities import LeaderTrade, Trader
from copytrade.domain.copying.value_objects import AssetClass, TradeSide

from ..commands import TRADES_PLACED, IngestWebhookTradesCommand, WebhookTrade
from ..dtos import IngestionSummary

logger = logging.getLogger(__name__)

UNKNOWN_ACCOUNT = "unknown"


class IngestWebhookTradesHandler(CommandHandler[IngestWebhookTradesCommand, IngestionSummary]):
    """Persist TRADES_PLACED trades of a leader as unprocessed LeaderTrades.

    Правила:
    - Інші event types тільки логуються (acknowledged)
    - Невідомий user або не-leader → всі угоди skipped
    - Та сама (leader, symbol, side, quantity) у dedup вікні → skipped
    - Невалідний рядок (side, quantity) → errors, решта обробляється
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, dedup_window_seconds: int = 300) -> None:
        self._uow_factory = uow_factory
        self._dedup_window = timedelta(seconds=dedup_window_seconds)

    async def handle(self, command: IngestWebhookTradesCommand) -> IngestionSummary:
        summary = IngestionSummary()

        if command.event_type != TRADES_PLACED:
            logger.info(
                "webhook.event_acknowledged",
                extra={"event_type": command.event_type, "user_ref": command.user_ref},
            )
            return summary

        if not command.trades:
            logger.warning("webhook.no_trades", extra={"user_ref": command.user_ref})
            return summary

        async with self._uow_factory() as uow:
            leader = await uow.traders.get_by_brokerage_user_id(command.user_ref)

        if leader is None or not leader.is_leader:
            logger.info(
                "webhook.leader_not_found",
                extra={"user_ref": command.user_ref, "trades": len(command.trades)},
            )
            summary.skipped = len(command.trades)
            return summary

        account_id = command.account_id or UNKNOWN_ACCOUNT
        if command.account_id is None:
            logger.warning("webhook.account_missing", extra={"leader_id": leader.id})

        for line in command.trades:
            try:
                created = await self._ingest(leader, account_id, line)
            except ValueError as e:
                logger.warning(
                    "webhook.trade_invalid",
                    extra={"leader_id": leader.id, "symbol": line.symbol, "error": str(e)},
                )
                summary.errors += 1
                continue

            if created:
                summary.processed += 1
            else:
                summary.skipped += 1

        logger.info("webhook.trades_ingested", extra={"leader_id": leader.id, **summary.to_dict()})
        return summary

    async def _ingest(self, leader: Trader, account_id: str, line: WebhookTrade) -> bool:
        side = TradeSide(line.action.strip().lower())
        symbol = line.symbol.strip().upper()
        if not symbol:
            raise ValueError("Webhook trade has no symbol")

        async with self._uow_factory() as uow:
            since = datetime.now(timezone.utc) - self._dedup_window
            duplicate = await uow.leader_trades.find_recent_duplicate(
                leader.id, symbol, side, line.quantity, since
            )
            if duplicate is not None:
                logger.info(
                    "webhook.trade_duplicate",
                    extra={"leader_id": leader.id, "symbol": symbol, "existing_id": duplicate.id},
                )
                return False

            trade = LeaderTrade.from_webhook(
                leader_id=leader.id,
                account_id=account_id,
                symbol=symbol,
                side=side,
                quantity=line.quantity,
                price=line.price,
                order_type=line.order_type,
                asset_class=_asset_class(line.asset_type),
                brokerage_order_id=line.order_id,
                executed_at=line.timestamp,
            )
            await uow.leader_trades.add(trade)
            await uow.commit()
        return True


def _asset_class(asset_type: str | None) -> AssetClass:
    if not asset_type:
        return AssetClass.STOCK
    try:
        return AssetClass(asset_type.lower())
    except ValueError:
        return AssetClass.STOCK
