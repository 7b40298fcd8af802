"""LeaderTradeRepository Port - persistence для LeaderTrade aggregates."""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..entities import LeaderTrade
from ..value_objects import TradeSide


class LeaderTradeRepository(ABC):
    """Abstract interface для leader trades (append-only audit trail)."""

    @abstractmethod
    async def add(self, trade: LeaderTrade) -> None:
        """Insert a new trade and assign its id."""

    @abstractmethod
    async def save(self, trade: LeaderTrade) -> None:
        """Persist mutable state (``processed``) of an existing trade."""

    @abstractmethod
    async def get_by_id(self, trade_id: int) -> Optional[LeaderTrade]:
        pass

    @abstractmethod
    async def get_unprocessed(self, limit: int | None = None) -> list[LeaderTrade]:
        """Get trades with ``processed = False`` ordered by ``detected_at`` ascending.

        Args:
            limit: Max trades per invocation (None = all).
        """

    @abstractmethod
    async def find_recent_duplicate(
        self,
        leader_id: int,
        symbol: str,
        side: TradeSide,
        quantity: Decimal,
        since: datetime,
    ) -> Optional[LeaderTrade]:
        """Find a matching trade detected at or after ``since``.

        Note:
            Використовується webhook ingestion для dedup вікна.
        """
