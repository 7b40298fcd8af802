"""CopyExecutionRepository Port.

Claim через unique constraint (leader_trade_id, relationship_id) замінює
in-memory lock і безпечний для кількох паралельних invocations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..entities import CopyExecution


class CopyExecutionRepository(ABC):
    @abstractmethod
    async def claim(self, execution: CopyExecution) -> bool:
        """Insert a PENDING execution.

        Returns:
            True якщо claim успішний, False якщо execution для цієї пари
            вже існує (constraint violation).
        """

    @abstractmethod
    async def save(self, execution: CopyExecution) -> None:
        """Persist status transition of an existing execution."""

    @abstractmethod
    async def get_by_id(self, execution_id: int) -> Optional[CopyExecution]:
        pass

    @abstractmethod
    async def get_for_pair(
        self, leader_trade_id: int, relationship_id: int
    ) -> Optional[CopyExecution]:
        pass

    @abstractmethod
    async def list_for_trade(self, leader_trade_id: int) -> list[CopyExecution]:
        pass

    @abstractmethod
    async def count_successful_since(self, follower_id: int, since: datetime) -> int:
        """Count SUCCESS executions of a follower created at or after ``since``."""

    @abstractmethod
    async def volume_since(self, follower_id: int, since: datetime) -> Decimal:
        """Dollar volume (quantity × executed_price) of SUCCESS executions since ``since``."""

    @abstractmethod
    async def get_stale(self, older_than: datetime) -> list[CopyExecution]:
        """Get PENDING/EXECUTING executions last updated before ``older_than``."""
