"""Webhook trade ingestion use cases."""

from .commands import TRADES_PLACED, IngestWebhookTradesCommand, WebhookTrade
from .dtos import IngestionSummary
from .handlers import IngestWebhookTradesHandler

__all__ = [
    "IngestWebhookTradesCommand",
    "IngestWebhookTradesHandler",
    "IngestionSummary",
    "TRADES_PLACED",
    "WebhookTrade",
]
