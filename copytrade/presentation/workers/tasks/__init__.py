"""Celery tasks."""

from .pipeline_tasks import (
    detect_leader_trades,
    monitor_open_positions,
    process_pending_trades,
)

__all__ = [
    "detect_leader_trades",
    "monitor_open_positions",
    "process_pending_trades",
]
