"""Position Aggregate Root - відкрита позиція follower'а з SL/TP платформи.

Position відповідає за:
- Average cost при докупівлі
- Зменшення при копіюванні sell лідера
- Закриття по stop-loss / take-profit / виходу лідера
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from copytrade.domain.shared import AggregateRoot

from ..events import PositionClosedEvent
from ..exceptions import PositionAlreadyClosedError
from ..value_objects import ExitReason, PositionStatus


class Position(AggregateRoot):
    """Open holding with platform-managed protective levels.

    SL/TP тут - не brokerage stop orders, а пороги, які перевіряє
    Position Risk Monitor. Семантика long-only: SL нижче входу, TP вище.

    Example:
        >>> position = Position.open(
        ...     owner_id=2,
        ...     account_id="acc-2",
        ...     symbol="AAPL",
        ...     quantity=Decimal("40"),
        ...     entry_price=Decimal("50"),
        ...     stop_loss=Decimal("47.50"),
        ... )
        >>> position.close(ExitReason.STOP_LOSS, Decimal("47.40"))
    """

    def __init__(
        self,
        owner_id: int,
        account_id: str,
        symbol: str,
        quantity: Decimal,
        average_cost: Decimal,
        relationship_id: Optional[int] = None,
        current_price: Optional[Decimal] = None,
        stop_loss: Optional[Decimal] = None,
        take_profit: Optional[Decimal] = None,
        status: PositionStatus = PositionStatus.OPEN,
        exit_reason: Optional[ExitReason] = None,
        exit_price: Optional[Decimal] = None,
        opened_at: Optional[datetime] = None,
        closed_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        """Initialize position.

        Args:
            owner_id: Trader ID власника.
            account_id: Brokerage account, на якому відкрита позиція.
            symbol: Ticker.
            quantity: Кількість.
            average_cost: Середня ціна входу.
            relationship_id: Relationship, копія якого відкрила позицію.
            current_price: Остання відома ціна (оновлюється ззовні).
            stop_loss: Stop-loss поріг.
            take_profit: Take-profit поріг.
            status: OPEN або CLOSED.
            exit_reason: Причина закриття.
            exit_price: Ціна закриття.
            opened_at: Час відкриття.
            closed_at: Час закриття.
            id: Position ID.
        """
        super().__init__(id)
        self.owner_id = owner_id
        self.account_id = account_id
        self.symbol = symbol
        self.quantity = quantity
        self.average_cost = average_cost
        self.relationship_id = relationship_id
        self.current_price = current_price
        self.stop_loss = stop_loss
        self.take_profit = take_profit
        self.status = status
        self.exit_reason = exit_reason
        self.exit_price = exit_price
        self.opened_at = opened_at or datetime.now(timezone.utc)
        self.closed_at = closed_at

    @classmethod
    def open(
        cls,
        owner_id: int,
        account_id: str,
        symbol: str,
        quantity: Decimal,
        entry_price: Decimal,
        relationship_id: Optional[int] = None,
        stop_loss: Optional[Decimal] = None,
        take_profit: Optional[Decimal] = None,
    ) -> "Position":
        """Factory для позиції з першого fill'а."""
        if quantity <= Decimal("0"):
            raise ValueError("Position quantity must be positive")
        return cls(
            owner_id=owner_id,
            account_id=account_id,
            symbol=symbol,
            quantity=quantity,
            average_cost=entry_price,
            relationship_id=relationship_id,
            current_price=entry_price,
            stop_loss=stop_loss,
            take_profit=take_profit,
        )

    def add_fill(self, quantity: Decimal, price: Decimal) -> None:
        """Докупівля: збільшити кількість і перерахувати average cost."""
        self._ensure_open()
        total_cost = self.average_cost * self.quantity + price * quantity
        self.quantity += quantity
        self.average_cost = total_cost / self.quantity
        self.current_price = price

    def reduce(self, quantity: Decimal, price: Decimal) -> None:
        """Часткове або повне зменшення після копіювання sell лідера.

        Якщо кількість падає до нуля - позиція закривається з LEADER_EXIT.
        """
        self._ensure_open()
        self.current_price = price
        if quantity >= self.quantity:
            self.close(ExitReason.LEADER_EXIT, price)
            return
        self.quantity -= quantity

    def close(self, reason: ExitReason, exit_price: Decimal) -> Decimal:
        """Close the position.

        Args:
            reason: STOP_LOSS, TAKE_PROFIT або LEADER_EXIT.
            exit_price: Ціна виконання закриваючого ордеру.

        Returns:
            Realized PnL.

        Raises:
            PositionAlreadyClosedError: Якщо вже закрита.

        Emits:
            PositionClosedEvent
        """
        self._ensure_open()

        self.status = PositionStatus.CLOSED
        self.exit_reason = reason
        self.exit_price = exit_price
        self.current_price = exit_price
        self.closed_at = datetime.now(timezone.utc)

        pnl = self.realized_pnl or Decimal("0")
        self.add_domain_event(
            PositionClosedEvent(
                position_id=self.id or 0,
                owner_id=self.owner_id,
                symbol=self.symbol,
                quantity=self.quantity,
                exit_price=exit_price,
                exit_reason=reason.value,
                realized_pnl=pnl,
            )
        )
        return pnl

    @property
    def is_open(self) -> bool:
        return self.status is PositionStatus.OPEN

    @property
    def has_protective_levels(self) -> bool:
        return self.stop_loss is not None or self.take_profit is not None

    @property
    def realized_pnl(self) -> Optional[Decimal]:
        if self.exit_price is None:
            return None
        return (self.exit_price - self.average_cost) * self.quantity

    @property
    def cost_basis(self) -> Decimal:
        return self.average_cost * self.quantity

    def _ensure_open(self) -> None:
        if self.status is not PositionStatus.OPEN:
            raise PositionAlreadyClosedError(
                "Position already closed",
                position_id=self.id,
                status=self.status.value,
            )

    def __repr__(self) -> str:
        return (
            f"Position(id={self.id}, owner={self.owner_id}, symbol={self.symbol}, "
            f"qty={self.quantity}, status={self.status.value})"
        )
