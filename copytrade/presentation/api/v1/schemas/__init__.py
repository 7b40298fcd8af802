"""API v1 schemas."""

from .webhook_schemas import (
    BrokerageWebhookPayload,
    ErrorResponse,
    WebhookResponse,
    WebhookTradePayload,
)

__all__ = [
    "BrokerageWebhookPayload",
    "ErrorResponse",
    "WebhookResponse",
    "WebhookTradePayload",
]
