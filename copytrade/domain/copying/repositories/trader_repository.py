"""TraderRepository та BrokerageConnectionRepository Ports."""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities import BrokerageConnection, Trader


class TraderRepository(ABC):
    @abstractmethod
    async def save(self, trader: Trader) -> None:
        pass

    @abstractmethod
    async def get_by_id(self, trader_id: int) -> Optional[Trader]:
        pass

    @abstractmethod
    async def get_by_brokerage_user_id(self, brokerage_user_id: str) -> Optional[Trader]:
        pass

    @abstractmethod
    async def get_leaders_with_active_connections(self) -> list[Trader]:
        """Traders with a leader role, credentials and at least one ACTIVE connection."""


class BrokerageConnectionRepository(ABC):
    @abstractmethod
    async def save(self, connection: BrokerageConnection) -> None:
        pass

    @abstractmethod
    async def get_active_for_trader(self, trader_id: int) -> list[BrokerageConnection]:
        pass
