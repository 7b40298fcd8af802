"""Pydantic schemas for the brokerage webhook ingress."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from copytrade.application.ingestion import IngestWebhookTradesCommand, WebhookTrade


class WebhookTradePayload(BaseModel):
    """One trade of a TRADES_PLACED event.

    Example:
        {"symbol": "AAPL", "action": "BUY", "quantity": 10, "price": 187.5,
         "orderType": "market", "assetType": "stock", "orderId": "ORD-1"}
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    symbol: str = Field(..., min_length=1)
    action: str
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    price: Decimal | None = Field(default=None, gt=0)
    order_type: str | None = Field(default=None, alias="orderType")
    asset_type: str | None = Field(default=None, alias="assetType")
    order_id: str | None = Field(default=None, alias="orderId")
    timestamp: datetime | None = None

    @field_validator("action")
    @classmethod
    def validate_action(cls, v: str) -> str:
        if v.upper() not in ("BUY", "SELL"):
            raise ValueError("action must be 'BUY' or 'SELL'")
        return v.upper()

    def to_trade(self) -> WebhookTrade:
        return WebhookTrade(
            symbol=self.symbol,
            action=self.action,
            quantity=self.quantity,
            price=self.price,
            order_type=self.order_type,
            asset_type=self.asset_type,
            order_id=self.order_id,
            timestamp=self.timestamp,
        )


class BrokerageWebhookPayload(BaseModel):
    """Push event of the brokerage aggregator.

    ``details`` містить або масив ``trades``, або поля однієї угоди.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    webhook_id: str | None = Field(default=None, alias="webhookId")
    client_id: str | None = Field(default=None, alias="clientId")
    user_id: str = Field(..., alias="userId")
    event_type: str = Field(..., alias="eventType")
    event_timestamp: datetime | None = Field(default=None, alias="eventTimestamp")
    webhook_secret: str = Field(..., alias="webhookSecret")
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def account_id(self) -> str | None:
        return self.details.get("accountId") or self.details.get("account_id")

    def trades(self) -> list[WebhookTradePayload]:
        raw_trades = self.details.get("trades")
        if isinstance(raw_trades, list):
            return [WebhookTradePayload.model_validate(t) for t in raw_trades]
        if self.details.get("symbol") and self.details.get("action"):
            return [WebhookTradePayload.model_validate(self.details)]
        return []

    def to_command(self) -> IngestWebhookTradesCommand:
        return IngestWebhookTradesCommand(
            event_type=self.event_type,
            user_ref=self.user_id,
            account_id=self.account_id,
            trades=tuple(t.to_trade() for t in self.trades()),
        )


class WebhookResponse(BaseModel):
    success: bool
    message: str
    event_type: str
    result: dict[str, int] | None = None


class ErrorResponse(BaseModel):
    error: str
    message: str
