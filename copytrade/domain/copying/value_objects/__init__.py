"""Value Objects для Copying bounded context."""

from .close_decision import CloseDecision
from .copy_decision import CopyDecision, PolicyContext, ProtectiveLevels
from .detected_trade import DetectedTrade
from .enums import (
    AllocationMethod,
    AssetClass,
    ConnectionStatus,
    ExecutionStatus,
    ExitReason,
    NotificationKind,
    PositionStatus,
    RelationshipStatus,
    SkipReason,
    TradeSide,
    TradeSource,
    TraderRole,
)

__all__ = [
    "AllocationMethod",
    "AssetClass",
    "CloseDecision",
    "ConnectionStatus",
    "CopyDecision",
    "DetectedTrade",
    "ExecutionStatus",
    "ExitReason",
    "NotificationKind",
    "PolicyContext",
    "PositionStatus",
    "ProtectiveLevels",
    "RelationshipStatus",
    "SkipReason",
    "TradeSide",
    "TradeSource",
    "TraderRole",
]
