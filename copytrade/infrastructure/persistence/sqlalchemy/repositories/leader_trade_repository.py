"""SQLAlchemy implementations of LeaderTradeRepository та PositionSnapshotRepository."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copying.entities import LeaderTrade, PositionSnapshot
from copytrade.domain.copying.repositories import (
    LeaderTradeRepository as LeaderTradeRepositoryPort,
    PositionSnapshotRepository as PositionSnapshotRepositoryPort,
)
from copytrade.domain.copying.value_objects import TradeSide
from copytrade.infrastructure.persistence.sqlalchemy.mappers import (
    LeaderTradeMapper,
    PositionSnapshotMapper,
)
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    LeaderTradeModel,
    PositionSnapshotModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyLeaderTradeRepository(LeaderTradeRepositoryPort):
    """SQLAlchemy implementation of LeaderTradeRepository port.

    Example:
        >>> async with uow_factory() as uow:
        ...     for trade in await uow.leader_trades.get_unprocessed():
        ...         ...
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = LeaderTradeMapper()

    async def add(self, trade: LeaderTrade) -> None:
        model = self._mapper.to_model(trade)
        self._session.add(model)
        await self._session.flush()  # Get generated ID
        trade.id = model.id

    async def save(self, trade: LeaderTrade) -> None:
        if trade.id is None:
            await self.add(trade)
            return

        existing_model = await self._session.get(LeaderTradeModel, trade.id)
        if existing_model is None:
            raise ValueError(f"LeaderTrade {trade.id} not found for update")

        self._mapper.update_model_from_entity(existing_model, trade)
        await self._session.flush()

    async def get_by_id(self, trade_id: int) -> Optional[LeaderTrade]:
        model = await self._session.get(LeaderTradeModel, trade_id)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_unprocessed(self, limit: int | None = None) -> list[LeaderTrade]:
        stmt = (
            select(LeaderTradeModel)
            .where(LeaderTradeModel.processed.is_(False))
            .order_by(LeaderTradeModel.detected_at.asc(), LeaderTradeModel.id.asc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def find_recent_duplicate(
        self,
        leader_id: int,
        symbol: str,
        side: TradeSide,
        quantity: Decimal,
        since: datetime,
    ) -> Optional[LeaderTrade]:
        stmt = (
            select(LeaderTradeModel)
            .where(LeaderTradeModel.leader_id == leader_id)
            .where(LeaderTradeModel.symbol == symbol)
            .where(LeaderTradeModel.side == side.value)
            .where(LeaderTradeModel.quantity == quantity)
            .where(LeaderTradeModel.detected_at >= since)
            .order_by(LeaderTradeModel.detected_at.desc())
            .limit(1)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)


class SQLAlchemyPositionSnapshotRepository(PositionSnapshotRepositoryPort):
    """Append-only snapshot store."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = PositionSnapshotMapper()

    async def append(self, snapshot: PositionSnapshot) -> bool:
        """Append snapshot; unique (account_id, previous_snapshot_id) робить baseline claim'ом."""
        model = self._mapper.to_model(snapshot)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            logger.info(
                "position_snapshot.baseline_already_consumed",
                extra={
                    "account_id": snapshot.account_id,
                    "previous_snapshot_id": snapshot.previous_snapshot_id,
                },
            )
            return False

        snapshot.id = model.id
        return True

    async def get_latest(self, account_id: str) -> Optional[PositionSnapshot]:
        stmt = (
            select(PositionSnapshotModel)
            .where(PositionSnapshotModel.account_id == account_id)
            .order_by(PositionSnapshotModel.captured_at.desc(), PositionSnapshotModel.id.desc())
            .limit(1)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)
