"""Repository Ports для Copying bounded context."""

from .copy_execution_repository import CopyExecutionRepository
from .copy_relationship_repository import CopyRelationshipRepository
from .leader_trade_repository import LeaderTradeRepository
from .notification_repository import NotificationRepository
from .position_repository import PositionRepository
from .position_snapshot_repository import PositionSnapshotRepository
from .trader_repository import BrokerageConnectionRepository, TraderRepository

__all__ = [
    "BrokerageConnectionRepository",
    "CopyExecutionRepository",
    "CopyRelationshipRepository",
    "LeaderTradeRepository",
    "NotificationRepository",
    "PositionRepository",
    "PositionSnapshotRepository",
    "TraderRepository",
]
