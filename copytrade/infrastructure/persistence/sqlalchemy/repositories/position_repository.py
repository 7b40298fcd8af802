"""SQLAlchemy implementation of PositionRepository."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copying.entities import Position
from copytrade.domain.copying.repositories import (
    PositionRepository as PositionRepositoryPort,
)
from copytrade.domain.copying.value_objects import PositionStatus
from copytrade.infrastructure.persistence.sqlalchemy.mappers import PositionMapper
from copytrade.infrastructure.persistence.sqlalchemy.models import PositionModel


class SQLAlchemyPositionRepository(PositionRepositoryPort):
    """SQLAlchemy implementation of PositionRepository port.

    Example:
        >>> async with uow_factory() as uow:
        ...     for position in await uow.positions.get_open_with_protective_levels():
        ...         decision = should_close_position(position)
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session
        self._mapper = PositionMapper()

    async def save(self, position: Position) -> None:
        """Save або update position.

        Note:
            - Якщо position.id is None → INSERT
            - Якщо position.id exists → UPDATE з optimistic locking
        """
        if position.id is None:
            model = self._mapper.to_model(position)
            self._session.add(model)
            await self._session.flush()  # Get generated ID
            position.id = model.id
        else:
            existing_model = await self._session.get(PositionModel, position.id)
            if existing_model is None:
                raise ValueError(f"Position {position.id} not found for update")

            self._mapper.update_model_from_entity(existing_model, position)
            await self._session.flush()

    async def get_by_id(self, position_id: int) -> Optional[Position]:
        model = await self._session.get(PositionModel, position_id)
        if model is None:
            return None

        return self._mapper.to_entity(model)

    async def get_open_with_protective_levels(self) -> list[Position]:
        stmt = (
            select(PositionModel)
            .where(PositionModel.status == PositionStatus.OPEN.value)
            .where(
                or_(
                    PositionModel.stop_loss.isnot(None),
                    PositionModel.take_profit.isnot(None),
                )
            )
            .order_by(PositionModel.opened_at.asc(), PositionModel.id.asc())
        )

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def claim_close(self, position_id: int, stale_before: datetime) -> bool:
        """Conditional UPDATE: рівно один з overlapping monitor runs отримує rowcount 1."""
        stmt = (
            update(PositionModel)
            .where(PositionModel.id == position_id)
            .where(PositionModel.status == PositionStatus.OPEN.value)
            .where(
                or_(
                    PositionModel.close_claimed_at.is_(None),
                    PositionModel.close_claimed_at < stale_before,
                )
            )
            .values(close_claimed_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def release_close(self, position_id: int) -> None:
        stmt = (
            update(PositionModel)
            .where(PositionModel.id == position_id)
            .values(close_claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def get_open_for_owner_symbol(
        self, owner_id: int, symbol: str
    ) -> Optional[Position]:
        stmt = (
            select(PositionModel)
            .where(PositionModel.owner_id == owner_id)
            .where(PositionModel.symbol == symbol)
            .where(PositionModel.status == PositionStatus.OPEN.value)
            .order_by(PositionModel.opened_at.asc())
            .limit(1)
        )

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None

        return self._mapper.to_entity(model)

    async def count_open_for_owner(self, owner_id: int) -> int:
        stmt = (
            select(func.count(PositionModel.id))
            .where(PositionModel.owner_id == owner_id)
            .where(PositionModel.status == PositionStatus.OPEN.value)
        )

        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def get_closed_for_relationship_since(
        self, relationship_id: int, since: datetime
    ) -> list[Position]:
        stmt = (
            select(PositionModel)
            .where(PositionModel.relationship_id == relationship_id)
            .where(PositionModel.status == PositionStatus.CLOSED.value)
            .where(PositionModel.closed_at >= since)
            .order_by(PositionModel.closed_at.asc())
        )

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]
