"""Mappers for Domain ↔ ORM conversion."""

from .copy_execution_mapper import CopyExecutionMapper
from .copy_relationship_mapper import CopyRelationshipMapper
from .leader_trade_mapper import LeaderTradeMapper, PositionSnapshotMapper
from .position_mapper import PositionMapper
from .trader_mapper import BrokerageConnectionMapper, NotificationMapper, TraderMapper

__all__ = [
    "BrokerageConnectionMapper",
    "CopyExecutionMapper",
    "CopyRelationshipMapper",
    "LeaderTradeMapper",
    "NotificationMapper",
    "PositionMapper",
    "PositionSnapshotMapper",
    "TraderMapper",
]
