"""CopyRelationshipRepository Port."""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities import CopyRelationship


class CopyRelationshipRepository(ABC):
    @abstractmethod
    async def add(self, relationship: CopyRelationship) -> None:
        """Insert a new relationship.

        Raises:
            DuplicateRelationshipError: Пара (follower, leader) вже існує.
        """

    @abstractmethod
    async def save(self, relationship: CopyRelationship) -> None:
        pass

    @abstractmethod
    async def get_by_id(self, relationship_id: int) -> Optional[CopyRelationship]:
        pass

    @abstractmethod
    async def get_active_for_leader(self, leader_id: int) -> list[CopyRelationship]:
        """Get ACTIVE relationships that copy ``leader_id``."""
