"""Repository implementations for SQLAlchemy."""

from .copy_execution_repository import SQLAlchemyCopyExecutionRepository
from .copy_relationship_repository import SQLAlchemyCopyRelationshipRepository
from .leader_trade_repository import (
    SQLAlchemyLeaderTradeRepository,
    SQLAlchemyPositionSnapshotRepository,
)
from .position_repository import SQLAlchemyPositionRepository
from .trader_repository import (
    SQLAlchemyBrokerageConnectionRepository,
    SQLAlchemyNotificationRepository,
    SQLAlchemyTraderRepository,
)

__all__ = [
    "SQLAlchemyBrokerageConnectionRepository",
    "SQLAlchemyCopyExecutionRepository",
    "SQLAlchemyCopyRelationshipRepository",
    "SQLAlchemyLeaderTradeRepository",
    "SQLAlchemyNotificationRepository",
    "SQLAlchemyPositionRepository",
    "SQLAlchemyPositionSnapshotRepository",
    "SQLAlchemyTraderRepository",
]
