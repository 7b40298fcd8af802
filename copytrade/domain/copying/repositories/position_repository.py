"""PositionRepository Port."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..entities import Position


class PositionRepository(ABC):
    """Abstract interface для position persistence.

    Example:
        >>> positions = await position_repo.get_open_with_protective_levels()
        >>> for position in positions:
        ...     decision = should_close_position(position)
    """

    @abstractmethod
    async def save(self, position: Position) -> None:
        """Insert (id is None) or update a position."""

    @abstractmethod
    async def get_by_id(self, position_id: int) -> Optional[Position]:
        pass

    @abstractmethod
    async def get_open_with_protective_levels(self) -> list[Position]:
        """Get OPEN positions with a stop-loss or take-profit set."""

    @abstractmethod
    async def claim_close(self, position_id: int, stale_before: datetime) -> bool:
        """Claim an OPEN position for closing.

        Returns:
            False, якщо позиція вже не OPEN або її закриває інший run
            (claim, старший за ``stale_before``, вважається покинутим).
        """

    @abstractmethod
    async def release_close(self, position_id: int) -> None:
        """Drop the close claim after a failed close."""

    @abstractmethod
    async def get_open_for_owner_symbol(
        self, owner_id: int, symbol: str
    ) -> Optional[Position]:
        """Get the owner's OPEN position in ``symbol`` (max one per symbol)."""

    @abstractmethod
    async def count_open_for_owner(self, owner_id: int) -> int:
        pass

    @abstractmethod
    async def get_closed_for_relationship_since(
        self, relationship_id: int, since: datetime
    ) -> list[Position]:
        """Get positions of a relationship closed at or after ``since``.

        Note:
            Використовується для stop-copying-on-loss правила.
        """
