"""Execution commands."""

from .process_pending_trades import ProcessPendingTradesCommand

__all__ = ["ProcessPendingTradesCommand"]
