"""Monitoring handlers."""

from .monitor_positions_handler import MonitorPositionsHandler

__all__ = ["MonitorPositionsHandler"]
