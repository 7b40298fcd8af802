"""LeaderTrade Aggregate Root - одна угода leader'а, яку треба розкопіювати.

LeaderTrade append-only: створюється детектором (poll) або webhook'ом,
єдина мутація - ``mark_processed()`` після fan-out на всіх followers.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from copytrade.domain.shared import AggregateRoot

from ..value_objects import AssetClass, DetectedTrade, TradeSide, TradeSource


class LeaderTrade(AggregateRoot):
    """Detected or reported trade of a leader account.

    Example:
        >>> trade = LeaderTrade.from_detection(
        ...     leader_id=1,
        ...     account_id="acc-1",
        ...     detected=DetectedTrade("AAPL", TradeSide.BUY, Decimal("10")),
        ... )
        >>> trade.processed
        False
    """

    def __init__(
        self,
        leader_id: int,
        account_id: str,
        symbol: str,
        side: TradeSide,
        quantity: Decimal,
        price: Optional[Decimal] = None,
        order_type: str = "market",
        asset_class: AssetClass = AssetClass.STOCK,
        source: TradeSource = TradeSource.POLL,
        brokerage_order_id: Optional[str] = None,
        is_exit: bool = False,
        stop_loss_price: Optional[Decimal] = None,
        take_profit_price: Optional[Decimal] = None,
        detected_at: Optional[datetime] = None,
        executed_at: Optional[datetime] = None,
        processed: bool = False,
        id: Optional[int] = None,
    ) -> None:
        """Initialize leader trade.

        Args:
            leader_id: Trader ID лідера.
            account_id: Brokerage account, з якого прийшла угода.
            symbol: Ticker.
            side: BUY або SELL.
            quantity: Кількість (завжди додатна).
            price: Ціна виконання, якщо відома.
            order_type: "market", "limit", ...
            asset_class: Клас активу для фільтрів relationship.
            source: POLL (snapshot diff) або WEBHOOK.
            brokerage_order_id: Order ID з webhook'а.
            is_exit: Угода повністю закрила позицію.
            stop_loss_price: SL лідера (для пропорційного перенесення).
            take_profit_price: TP лідера.
            detected_at: Коли угоду виявлено.
            executed_at: Коли угоду виконано у брокера.
            processed: Чи вже оброблена copy engine'ом.
            id: LeaderTrade ID.
        """
        super().__init__(id)

        if quantity <= Decimal("0"):
            raise ValueError("Leader trade quantity must be positive")

        self.leader_id = leader_id
        self.account_id = account_id
        self.symbol = symbol
        self.side = side
        self.quantity = quantity
        self.price = price
        self.order_type = order_type
        self.asset_class = asset_class
        self.source = source
        self.brokerage_order_id = brokerage_order_id
        self.is_exit = is_exit
        self.stop_loss_price = stop_loss_price
        self.take_profit_price = take_profit_price
        self.detected_at = detected_at or datetime.now(timezone.utc)
        self.executed_at = executed_at
        self.processed = processed

    @classmethod
    def from_detection(
        cls, leader_id: int, account_id: str, detected: DetectedTrade
    ) -> "LeaderTrade":
        """Build a pending trade from a snapshot diff."""
        return cls(
            leader_id=leader_id,
            account_id=account_id,
            symbol=detected.symbol,
            side=detected.side,
            quantity=detected.quantity,
            is_exit=detected.is_exit,
            source=TradeSource.POLL,
        )

    @classmethod
    def from_webhook(
        cls,
        leader_id: int,
        account_id: str,
        symbol: str,
        side: TradeSide,
        quantity: Decimal,
        price: Optional[Decimal] = None,
        order_type: Optional[str] = None,
        asset_class: Optional[AssetClass] = None,
        brokerage_order_id: Optional[str] = None,
        executed_at: Optional[datetime] = None,
    ) -> "LeaderTrade":
        """Build a pending trade from a brokerage push event.

        Webhook не каже чи угода закрила позицію, тому ``is_exit`` завжди False.
        """
        return cls(
            leader_id=leader_id,
            account_id=account_id,
            symbol=symbol.upper(),
            side=side,
            quantity=quantity,
            price=price,
            order_type=(order_type or "market").lower(),
            asset_class=asset_class or AssetClass.STOCK,
            source=TradeSource.WEBHOOK,
            brokerage_order_id=brokerage_order_id,
            executed_at=executed_at,
            is_exit=False,
        )

    def mark_processed(self) -> None:
        """Mark trade as consumed by the copy engine (idempotent)."""
        self.processed = True

    @property
    def notional(self) -> Optional[Decimal]:
        if self.price is None:
            return None
        return self.quantity * self.price

    def __repr__(self) -> str:
        return (
            f"LeaderTrade(id={self.id}, leader_id={self.leader_id}, "
            f"{self.side.value} {self.quantity} {self.symbol}, processed={self.processed})"
        )
