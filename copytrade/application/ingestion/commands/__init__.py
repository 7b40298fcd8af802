"""Ingestion commands."""

from .ingest_webhook_trades import TRADES_PLACED, IngestWebhookTradesCommand, WebhookTrade

__all__ = ["IngestWebhookTradesCommand", "TRADES_PLACED", "WebhookTrade"]
