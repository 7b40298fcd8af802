"""Trade detection use cases (position snapshot polling)."""

from .commands import PollLeadersCommand
from .dtos import AccountDetection, DetectionSummary
from .handlers import PollLeadersHandler
from .trade_detector import TradeDetector

__all__ = [
    "AccountDetection",
    "DetectionSummary",
    "PollLeadersCommand",
    "PollLeadersHandler",
    "TradeDetector",
]
