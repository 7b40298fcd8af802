"""Entities та Aggregate Roots для Copying bounded context."""

from .brokerage_connection import BrokerageConnection
from .copy_execution import CopyExecution
from .copy_relationship import CopyRelationship
from .leader_trade import LeaderTrade
from .notification import Notification
from .position import Position
from .position_snapshot import PositionSnapshot
from .trader import Trader

__all__ = [
    "BrokerageConnection",
    "CopyExecution",
    "CopyRelationship",
    "LeaderTrade",
    "Notification",
    "Position",
    "PositionSnapshot",
    "Trader",
]
