"""CopyExecution Aggregate Root - одна спроба скопіювати LeaderTrade для одного follower'а.

Це state machine всього fan-out:
    PENDING → SKIPPED
    PENDING → EXECUTING → SUCCESS | FAILED
    PENDING → FAILED

Terminal статуси immutable. Унікальність (leader_trade_id, relationship_id)
гарантує at-most-once копіювання для кожного follower'а.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from copytrade.domain.shared import AggregateRoot, InvalidStateTransition

from ..events import CopyExecutedEvent, CopyFailedEvent
from ..value_objects import ExecutionStatus, SkipReason, TradeSide


class CopyExecution(AggregateRoot):
    """Replication attempt of one leader trade for one relationship.

    Example:
        >>> execution = CopyExecution.claim(trade, relationship)
        >>> await uow.executions.claim(execution)    # INSERT, unique constraint
        >>> execution.mark_executing(Decimal("40"))
        >>> execution.mark_succeeded("ORD-1", Decimal("50.10"))
    """

    _ALLOWED_TRANSITIONS = {
        ExecutionStatus.PENDING: {
            ExecutionStatus.SKIPPED,
            ExecutionStatus.EXECUTING,
            ExecutionStatus.FAILED,
        },
        ExecutionStatus.EXECUTING: {ExecutionStatus.SUCCESS, ExecutionStatus.FAILED},
    }

    def __init__(
        self,
        relationship_id: int,
        leader_trade_id: int,
        follower_id: int,
        leader_id: int,
        symbol: str,
        side: TradeSide,
        quantity: Decimal = Decimal("0"),
        status: ExecutionStatus = ExecutionStatus.PENDING,
        reason: Optional[str] = None,
        brokerage_order_id: Optional[str] = None,
        executed_price: Optional[Decimal] = None,
        created_at: Optional[datetime] = None,
        executed_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        """Initialize execution.

        Args:
            relationship_id: CopyRelationship ID.
            leader_trade_id: LeaderTrade ID.
            follower_id: Trader ID follower'а (денормалізовано для аудиту).
            leader_id: Trader ID leader'а.
            symbol: Ticker.
            side: BUY або SELL.
            quantity: Розрахована кількість для follower'а.
            status: Поточний статус.
            reason: Skip reason code або текст помилки.
            brokerage_order_id: Order ID у брокера.
            executed_price: Фактична ціна виконання.
            created_at: Час claim.
            executed_at: Час виконання у брокера.
            updated_at: Час останньої зміни статусу.
            id: Execution ID.
        """
        super().__init__(id)
        self.relationship_id = relationship_id
        self.leader_trade_id = leader_trade_id
        self.follower_id = follower_id
        self.leader_id = leader_id
        self.symbol = symbol
        self.side = side
        self.quantity = quantity
        self.status = status
        self.reason = reason
        self.brokerage_order_id = brokerage_order_id
        self.executed_price = executed_price
        self.created_at = created_at or datetime.now(timezone.utc)
        self.executed_at = executed_at
        self.updated_at = updated_at or self.created_at

    @classmethod
    def claim(cls, trade, relationship) -> "CopyExecution":
        """Create the PENDING claim row for (trade, relationship).

        Args:
            trade: LeaderTrade (must be persisted).
            relationship: CopyRelationship (must be persisted).
        """
        if trade.id is None or relationship.id is None:
            raise ValueError("Cannot claim execution for unsaved trade or relationship")
        return cls(
            relationship_id=relationship.id,
            leader_trade_id=trade.id,
            follower_id=relationship.follower_id,
            leader_id=relationship.leader_id,
            symbol=trade.symbol,
            side=trade.side,
        )

    # ==================== Transitions ====================

    def mark_skipped(self, reason: SkipReason) -> None:
        """PENDING → SKIPPED з reason code (policy decision, не помилка)."""
        self._transition(ExecutionStatus.SKIPPED)
        self.reason = reason.value

    def mark_executing(self, quantity: Decimal) -> None:
        """PENDING → EXECUTING з розрахованою кількістю."""
        if quantity <= Decimal("0"):
            raise ValueError("Execution quantity must be positive")
        self._transition(ExecutionStatus.EXECUTING)
        self.quantity = quantity

    def mark_succeeded(
        self,
        brokerage_order_id: str,
        executed_price: Decimal,
        executed_quantity: Optional[Decimal] = None,
    ) -> None:
        """EXECUTING → SUCCESS.

        Emits:
            CopyExecutedEvent
        """
        self._transition(ExecutionStatus.SUCCESS)
        self.brokerage_order_id = brokerage_order_id
        self.executed_price = executed_price
        if executed_quantity is not None and executed_quantity > 0:
            self.quantity = executed_quantity
        self.executed_at = self.updated_at

        self.add_domain_event(
            CopyExecutedEvent(
                execution_id=self.id or 0,
                follower_id=self.follower_id,
                leader_id=self.leader_id,
                symbol=self.symbol,
                side=self.side.value,
                quantity=self.quantity,
                executed_price=executed_price,
                brokerage_order_id=brokerage_order_id,
            )
        )

    def mark_failed(self, reason: str) -> None:
        """PENDING/EXECUTING → FAILED. Ніколи не ретраїться автоматично.

        Emits:
            CopyFailedEvent
        """
        self._transition(ExecutionStatus.FAILED)
        self.reason = reason

        self.add_domain_event(
            CopyFailedEvent(
                execution_id=self.id or 0,
                follower_id=self.follower_id,
                leader_id=self.leader_id,
                symbol=self.symbol,
                side=self.side.value,
                reason=reason,
            )
        )

    def _transition(self, to_status: ExecutionStatus) -> None:
        allowed = self._ALLOWED_TRANSITIONS.get(self.status, set())
        if to_status not in allowed:
            raise InvalidStateTransition(
                f"Cannot transition execution from {self.status.value} to {to_status.value}",
                execution_id=self.id,
                from_status=self.status.value,
                to_status=to_status.value,
            )
        self.status = to_status
        self.updated_at = datetime.now(timezone.utc)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def __repr__(self) -> str:
        return (
            f"CopyExecution(id={self.id}, trade={self.leader_trade_id}, "
            f"relationship={self.relationship_id}, status={self.status.value})"
        )
