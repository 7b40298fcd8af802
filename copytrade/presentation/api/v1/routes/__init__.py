"""API v1 routes."""

from .cron import router as cron_router
from .webhooks import router as webhooks_router

__all__ = ["cron_router", "webhooks_router"]
