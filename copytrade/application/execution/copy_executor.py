"""CopyExecutor - replicate one leader trade for one copy relationship.

Кожен виклик працює у власному UoW (власна AsyncSession), тож паралельні
workers ніколи не ділять сесію, а збій одного follower'а не зачіпає інших.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

from copytrade.application.shared import (
    OrderSubmitter,
    UnitOfWork,
    UnitOfWorkFactory,
    with_timeout,
)
from copytrade.domain.brokerage.exceptions import BrokerageError
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.brokerage.value_objects import BrokerageCredentials
from copytrade.domain.copying.entities import (
    BrokerageConnection,
    CopyExecution,
    CopyRelationship,
    LeaderTrade,
    Position,
)
from copytrade.domain.copying.exceptions import CredentialsNotConfiguredError
from copytrade.domain.copying.services import (
    CopyPolicyEvaluator,
    normalize_positions,
    protective_levels,
)
from copytrade.domain.copying.value_objects import (
    AllocationMethod,
    PolicyContext,
    SkipReason,
    TradeSide,
)
from copytrade.domain.shared import DomainEvent
from copytrade.infrastructure.encryption import CredentialResolver
from copytrade.infrastructure.messaging import EventBus

from .dtos import ExecutionOutcome

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


class CopyExecutor:
    """Claim → evaluate → submit → record для однієї пари (trade, relationship).

    Flow:
    1. INSERT CopyExecution(pending); конфлікт → DUPLICATE, нічого не робимо
    2. Checks без брокера (inactive, asset class, loss threshold) → SKIPPED
    3. Connection та credentials follower'а; без credentials → FAILED
    4. PolicyContext (balances, quote, exposure counters) → evaluate;
       proportional без credentials лідера → FAILED
    5. Skip → SKIPPED з reason code
    6. EXECUTING → OrderSubmitter; успіх → SUCCESS + Position; збій → FAILED

    Domain events публікуються тільки після commit.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        brokerage: BrokeragePort,
        credential_resolver: CredentialResolver,
        evaluator: CopyPolicyEvaluator,
        event_bus: EventBus,
        call_timeout: float,
        loss_lookback_days: int = 30,
    ) -> None:
        self._uow_factory = uow_factory
        self._brokerage = brokerage
        self._credentials = credential_resolver
        self._evaluator = evaluator
        self._event_bus = event_bus
        self._call_timeout = call_timeout
        self._loss_lookback = timedelta(days=loss_lookback_days)
        self._submitter = OrderSubmitter(brokerage, call_timeout)

    async def execute(
        self, trade: LeaderTrade, relationship: CopyRelationship
    ) -> ExecutionOutcome:
        log_context = {
            "leader_trade_id": trade.id,
            "relationship_id": relationship.id,
            "follower_id": relationship.follower_id,
            "symbol": trade.symbol,
            "side": trade.side.value,
        }

        async with self._uow_factory() as uow:
            execution = CopyExecution.claim(trade, relationship)
            if not await uow.executions.claim(execution):
                return ExecutionOutcome.DUPLICATE
            await uow.commit()

            follower_return = await self._recent_return(uow, relationship)
            reason = self._evaluator.screen(trade, relationship, follower_return)
            if reason is not None:
                return await self._skip(uow, execution, reason, log_context)

            connection = await self._follower_connection(uow, relationship.follower_id)
            credentials: Optional[BrokerageCredentials] = None
            if connection is not None:
                try:
                    credentials = await self._follower_credentials(uow, relationship.follower_id)
                except CredentialsNotConfiguredError as e:
                    return await self._fail(uow, execution, str(e), log_context)

            try:
                context = await self._build_context(
                    uow, trade, relationship, connection, credentials, follower_return
                )
            except CredentialsNotConfiguredError as e:
                return await self._fail(uow, execution, str(e), log_context)
            except BrokerageError as e:
                return await self._fail(uow, execution, f"context unavailable: {e}", log_context)

            decision = self._evaluator.evaluate(trade, relationship, context)
            if not decision.should_copy:
                return await self._skip(uow, execution, decision.reason, log_context)

            execution.mark_executing(decision.quantity)
            await uow.executions.save(execution)
            await uow.commit()

            try:
                fill = await self._submitter.submit(
                    credentials,
                    connection.account_id,
                    trade.side.brokerage_action,
                    trade.symbol,
                    decision.quantity,
                    fallback_price=decision.price,
                )
            except BrokerageError as e:
                return await self._fail(uow, execution, str(e), log_context)

            execution.mark_succeeded(fill.order_id, fill.executed_price, fill.filled_quantity)
            await uow.executions.save(execution)

            position = await self._apply_fill(
                uow, trade, relationship, connection, fill.filled_quantity, fill.executed_price
            )

            stored_relationship = await uow.relationships.get_by_id(relationship.id)
            if stored_relationship is not None:
                stored_relationship.record_copy()
                await uow.relationships.save(stored_relationship)

            await uow.commit()

            logger.info(
                "copy_engine.execution_succeeded",
                extra={
                    **log_context,
                    "quantity": str(execution.quantity),
                    "executed_price": str(fill.executed_price),
                    "order_id": fill.order_id,
                },
            )

            events = execution.get_domain_events()
            if position is not None:
                events += position.get_domain_events()
            await self._publish(events)
            return ExecutionOutcome.SUCCEEDED

    # ==================== Context ====================

    async def _build_context(
        self,
        uow: UnitOfWork,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        connection: Optional[BrokerageConnection],
        credentials: Optional[BrokerageCredentials],
        follower_return: Optional[Decimal],
    ) -> PolicyContext:
        if connection is None or credentials is None:
            return PolicyContext(
                has_active_connection=False,
                follower_return_percent=follower_return,
            )

        account_id = connection.account_id
        balance = await with_timeout(
            self._brokerage.get_account_balance(credentials, account_id),
            self._call_timeout,
            "get_account_balance",
        )

        leader_value = Decimal("0")
        if relationship.allocation_method is AllocationMethod.PROPORTIONAL:
            leader_value = await self._leader_portfolio_value(uow, trade)

        price = trade.price
        if price is None or price <= 0:
            price = await with_timeout(
                self._brokerage.get_quote(credentials, account_id, trade.symbol),
                self._call_timeout,
                "get_quote",
            )

        holdings = normalize_positions(
            await with_timeout(
                self._brokerage.get_account_positions(credentials, account_id),
                self._call_timeout,
                "get_account_positions",
            )
        )

        start_of_day = datetime.now(timezone.utc).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        return PolicyContext(
            follower_portfolio_value=balance.total_value,
            leader_portfolio_value=leader_value,
            trade_price=price,
            has_active_connection=True,
            follower_return_percent=follower_return,
            open_positions_count=await uow.positions.count_open_for_owner(
                relationship.follower_id
            ),
            trades_copied_today=await uow.executions.count_successful_since(
                relationship.follower_id, start_of_day
            ),
            volume_copied_today=await uow.executions.volume_since(
                relationship.follower_id, start_of_day
            ),
            held_quantity=holdings.get(trade.symbol, Decimal("0")),
        )

    async def _leader_portfolio_value(self, uow: UnitOfWork, trade: LeaderTrade) -> Decimal:
        """Leader's total portfolio value for proportional sizing.

        Raises:
            CredentialsNotConfiguredError: Лідер не знайдений або без credentials.
        """
        leader = await uow.traders.get_by_id(trade.leader_id)
        if leader is None:
            raise CredentialsNotConfiguredError(
                "Leader not found for proportional sizing", trader_id=trade.leader_id
            )
        try:
            leader_credentials = self._credentials.resolve(leader)
        except CredentialsNotConfiguredError as e:
            raise CredentialsNotConfiguredError(
                f"Leader credentials unavailable for proportional sizing: {e.message}",
                trader_id=leader.id,
            ) from e
        balance = await with_timeout(
            self._brokerage.get_account_balance(leader_credentials, trade.account_id),
            self._call_timeout,
            "get_account_balance",
        )
        return balance.total_value

    async def _recent_return(
        self, uow: UnitOfWork, relationship: CopyRelationship
    ) -> Optional[Decimal]:
        """Realized return (%) of positions this relationship closed in the lookback window."""
        if relationship.stop_copying_threshold is None:
            return None
        since = datetime.now(timezone.utc) - self._loss_lookback
        closed = await uow.positions.get_closed_for_relationship_since(relationship.id, since)
        cost = sum((p.cost_basis for p in closed), Decimal("0"))
        if cost <= 0:
            return None
        pnl = sum((p.realized_pnl or Decimal("0") for p in closed), Decimal("0"))
        return pnl / cost * _HUNDRED

    async def _follower_connection(
        self, uow: UnitOfWork, follower_id: int
    ) -> Optional[BrokerageConnection]:
        connections = await uow.connections.get_active_for_trader(follower_id)
        return connections[0] if connections else None

    async def _follower_credentials(
        self, uow: UnitOfWork, follower_id: int
    ) -> BrokerageCredentials:
        follower = await uow.traders.get_by_id(follower_id)
        if follower is None:
            raise CredentialsNotConfiguredError(
                "Follower not found", trader_id=follower_id
            )
        return self._credentials.resolve(follower)

    # ==================== Recording ====================

    async def _apply_fill(
        self,
        uow: UnitOfWork,
        trade: LeaderTrade,
        relationship: CopyRelationship,
        connection: BrokerageConnection,
        quantity: Decimal,
        price: Decimal,
    ) -> Optional[Position]:
        position = await uow.positions.get_open_for_owner_symbol(
            relationship.follower_id, trade.symbol
        )

        if trade.side is TradeSide.BUY:
            if position is None:
                levels = protective_levels(trade.side, price, relationship, trade)
                position = Position.open(
                    owner_id=relationship.follower_id,
                    account_id=connection.account_id,
                    symbol=trade.symbol,
                    quantity=quantity,
                    entry_price=price,
                    relationship_id=relationship.id,
                    stop_loss=levels.stop_loss,
                    take_profit=levels.take_profit,
                )
            else:
                position.add_fill(quantity, price)
        elif position is not None:
            position.reduce(quantity, price)
        else:
            # Продано позицію, яку платформа не відкривала
            return None

        await uow.positions.save(position)
        return position

    async def _skip(
        self,
        uow: UnitOfWork,
        execution: CopyExecution,
        reason: SkipReason,
        log_context: dict,
    ) -> ExecutionOutcome:
        execution.mark_skipped(reason)
        await uow.executions.save(execution)
        await uow.commit()
        logger.info(
            "copy_engine.execution_skipped",
            extra={**log_context, "reason": reason.value},
        )
        return ExecutionOutcome.SKIPPED

    async def _fail(
        self,
        uow: UnitOfWork,
        execution: CopyExecution,
        reason: str,
        log_context: dict,
    ) -> ExecutionOutcome:
        execution.mark_failed(reason)
        await uow.executions.save(execution)
        await uow.commit()
        logger.warning("copy_engine.execution_failed", extra={**log_context, "error": reason})
        await self._publish(execution.get_domain_events())
        return ExecutionOutcome.FAILED

    async def _publish(self, events: list[DomainEvent]) -> None:
        await self._event_bus.publish_all(events)
