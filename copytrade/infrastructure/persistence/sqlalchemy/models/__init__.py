"""SQLAlchemy ORM models."""

from .base import Base
from .copy_execution_model import CopyExecutionModel
from .copy_relationship_model import CopyRelationshipModel
from .leader_trade_model import LeaderTradeModel, PositionSnapshotModel
from .notification_model import NotificationModel
from .position_model import PositionModel
from .trader_model import BrokerageConnectionModel, TraderModel

__all__ = [
    "Base",
    "BrokerageConnectionModel",
    "CopyExecutionModel",
    "CopyRelationshipModel",
    "LeaderTradeModel",
    "NotificationModel",
    "PositionModel",
    "PositionSnapshotModel",
    "TraderModel",
]
