"""ProcessPendingTrades Handler - scheduled entry point of the Copy Execution Engine."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone

from copytrade.application.shared import CommandHandler, UnitOfWorkFactory
from copytrade.domain.copying.entities import CopyRelationship, LeaderTrade
from copytrade.infrastructure.messaging import EventBus

from ..commands import ProcessPendingTradesCommand
from ..copy_executor import CopyExecutor
from ..dtos import ExecutionOutcome, ProcessingSummary

logger = logging.getLogger(__name__)

STALE_EXECUTION_REASON = "execution interrupted"


class ProcessPendingTradesHandler(
    CommandHandler[ProcessPendingTradesCommand, ProcessingSummary]
):
    """Fan out unprocessed leader trades to all active followers.

    Flow:
    1. Reap stale claims (pending/executing довше за stale_after) → FAILED
    2. Load unprocessed trades, oldest first
    3. Для кожної угоди: active relationships leader'а → CopyExecutor
       паралельно під semaphore
    4. Mark trade processed незалежно від outcome'ів

    At-most-once гарантує claim у CopyExecutor: overlapping invocation
    отримає DUPLICATE для вже заклеймлених пар.

    Example:
        >>> handler = ProcessPendingTradesHandler(uow_factory, executor, event_bus)
        >>> summary = await handler.handle(ProcessPendingTradesCommand())
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        executor: CopyExecutor,
        event_bus: EventBus,
        max_concurrency: int = 5,
        stale_after_seconds: int = 300,
    ) -> None:
        self._uow_factory = uow_factory
        self._executor = executor
        self._event_bus = event_bus
        self._max_concurrency = max_concurrency
        self._stale_after = timedelta(seconds=stale_after_seconds)

    async def handle(self, command: ProcessPendingTradesCommand) -> ProcessingSummary:
        summary = ProcessingSummary()
        summary.stale_reaped = await self._reap_stale_executions()

        async with self._uow_factory() as uow:
            trades = await uow.leader_trades.get_unprocessed(limit=command.limit)

        if not trades:
            logger.debug("copy_engine.no_pending_trades")
            return summary

        logger.info("copy_engine.started", extra={"pending_trades": len(trades)})
        semaphore = asyncio.Semaphore(self._max_concurrency)

        for trade in trades:
            async with self._uow_factory() as uow:
                relationships = await uow.relationships.get_active_for_leader(trade.leader_id)

            async def run(relationship: CopyRelationship, trade: LeaderTrade = trade) -> ExecutionOutcome:
                async with semaphore:
                    return await self._executor.execute(trade, relationship)

            outcomes = await asyncio.gather(*(run(r) for r in relationships))
            for outcome in outcomes:
                summary.record(outcome)

            await self._mark_processed(trade)
            summary.trades_processed += 1

            logger.info(
                "copy_engine.trade_processed",
                extra={
                    "leader_trade_id": trade.id,
                    "symbol": trade.symbol,
                    "side": trade.side.value,
                    "relationships": len(relationships),
                    "outcomes": [o.value for o in outcomes],
                },
            )

        logger.info("copy_engine.completed", extra=summary.to_dict())
        return summary

    async def _mark_processed(self, trade: LeaderTrade) -> None:
        async with self._uow_factory() as uow:
            stored = await uow.leader_trades.get_by_id(trade.id)
            if stored is None:
                return
            stored.mark_processed()
            await uow.leader_trades.save(stored)
            await uow.commit()

    async def _reap_stale_executions(self) -> int:
        """Fail claims left pending/executing by a crashed or timed-out invocation.

        Такий ордер міг бути поданий, тому execution не ретраїться, а
        фіксується як FAILED для ручної перевірки.
        """
        older_than = datetime.now(timezone.utc) - self._stale_after
        async with self._uow_factory() as uow:
            stale = await uow.executions.get_stale(older_than)
            for execution in stale:
                execution.mark_failed(STALE_EXECUTION_REASON)
                await uow.executions.save(execution)
            await uow.commit()

        if stale:
            logger.warning(
                "copy_engine.stale_executions_reaped",
                extra={"count": len(stale), "execution_ids": [e.id for e in stale]},
            )
            for execution in stale:
                await self._event_bus.publish_all(execution.get_domain_events())
        return len(stale)
