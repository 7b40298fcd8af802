"""Domain Events для Copying bounded context."""

from .copy_events import CopyExecutedEvent, CopyFailedEvent, PositionClosedEvent

__all__ = [
    "CopyExecutedEvent",
    "CopyFailedEvent",
    "PositionClosedEvent",
]
