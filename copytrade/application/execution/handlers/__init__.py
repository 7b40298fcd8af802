"""Execution handlers."""

from .process_pending_trades_handler import ProcessPendingTradesHandler

__all__ = ["ProcessPendingTradesHandler"]
