"""Position Risk Monitor use cases."""

from .commands import MonitorPositionsCommand
from .dtos import MonitoringSummary
from .handlers import MonitorPositionsHandler

__all__ = ["MonitorPositionsCommand", "MonitorPositionsHandler", "MonitoringSummary"]
