"""PositionSnapshotRepository Port - Position Snapshot Store.

Тільки append та read-latest: snapshots ніколи не оновлюються на місці.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..entities import PositionSnapshot


class PositionSnapshotRepository(ABC):
    @abstractmethod
    async def append(self, snapshot: PositionSnapshot) -> bool:
        """Append a new snapshot for its account.

        Returns:
            False, якщо baseline ``snapshot.previous_snapshot_id`` вже спожитий
            іншим snapshot'ом (overlapping poll). Транзакція тоді відкочена.
        """

    @abstractmethod
    async def get_latest(self, account_id: str) -> Optional[PositionSnapshot]:
        """Get the most recent snapshot of an account, or None on first run."""
