"""Ingestion handlers."""

from .ingest_webhook_trades_handler import IngestWebhookTradesHandler

__all__ = ["IngestWebhookTradesHandler"]
