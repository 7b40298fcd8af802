"""PositionSnapshot entity - point-in-time map symbol → quantity для одного рахунку."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Mapping, Optional

from copytrade.domain.shared import Entity


class PositionSnapshot(Entity):
    """Diff baseline for the trade detector.

    Snapshots тільки додаються, ніколи не оновлюються. ``previous_snapshot_id``
    - baseline, проти якого цей snapshot порахований; кожен baseline
    може бути спожитий лише одним snapshot'ом свого рахунку.
    """

    def __init__(
        self,
        account_id: str,
        positions: Mapping[str, Decimal],
        captured_at: Optional[datetime] = None,
        previous_snapshot_id: Optional[int] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)
        self.account_id = account_id
        self.positions: dict[str, Decimal] = dict(positions)
        self.captured_at = captured_at or datetime.now(timezone.utc)
        self.previous_snapshot_id = previous_snapshot_id

    @classmethod
    def capture(
        cls,
        account_id: str,
        positions: Mapping[str, Decimal],
        previous: Optional["PositionSnapshot"] = None,
    ) -> "PositionSnapshot":
        return cls(
            account_id=account_id,
            positions=positions,
            previous_snapshot_id=previous.id if previous is not None else None,
        )

    def quantity_of(self, symbol: str) -> Decimal:
        return self.positions.get(symbol, Decimal("0"))

    def __repr__(self) -> str:
        return (
            f"PositionSnapshot(id={self.id}, account_id={self.account_id}, "
            f"previous={self.previous_snapshot_id}, symbols={len(self.positions)})"
        )
