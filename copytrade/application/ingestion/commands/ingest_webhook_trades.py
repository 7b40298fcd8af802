"""IngestWebhookTrades Command - verified brokerage push event."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from copytrade.application.shared import Command

TRADES_PLACED = "TRADES_PLACED"


@dataclass(frozen=True)
class WebhookTrade:
    """One trade line of a TRADES_PLACED event."""

    symbol: str
    action: str
    quantity: Decimal
    price: Optional[Decimal] = None
    order_type: Optional[str] = None
    asset_type: Optional[str] = None
    order_id: Optional[str] = None
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class IngestWebhookTradesCommand(Command):
    """Typed webhook event; secret вже перевірений presentation layer'ом.

    Example:
        >>> command = IngestWebhookTradesCommand(
        ...     event_type="TRADES_PLACED",
        ...     user_ref="snap-user-1",
        ...     account_id="acc-1",
        ...     trades=(WebhookTrade("AAPL", "BUY", Decimal("10")),),
        ... )
    """

    event_type: str
    user_ref: str
    account_id: Optional[str] = None
    trades: tuple[WebhookTrade, ...] = field(default_factory=tuple)
