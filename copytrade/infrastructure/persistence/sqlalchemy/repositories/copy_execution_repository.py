"""SQLAlchemy implementation of CopyExecutionRepository."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copying.entities import CopyExecution
from copytrade.domain.copying.repositories import (
    CopyExecutionRepository as CopyExecutionRepositoryPort,
)
from copytrade.domain.copying.value_objects import ExecutionStatus
from copytrade.infrastructure.persistence.sqlalchemy.mappers import CopyExecutionMapper
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyExecutionModel

logger = logging.getLogger(__name__)


class SQLAlchemyCopyExecutionRepository(CopyExecutionRepositoryPort):
    """SQLAlchemy implementation of CopyExecutionRepository port.

    Claim = INSERT під unique constraint. Це працює і між процесами, і між
    overlapping invocations scheduler'а, на відміну від in-memory lock.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = CopyExecutionMapper()

    async def claim(self, execution: CopyExecution) -> bool:
        """INSERT PENDING row for (leader_trade_id, relationship_id).

        Note:
            Має бути першим write в UoW: при конфлікті session відкочується.
        """
        model = self._mapper.to_model(execution)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError:
            await self._session.rollback()
            logger.info(
                "copy_execution.already_claimed",
                extra={
                    "leader_trade_id": execution.leader_trade_id,
                    "relationship_id": execution.relationship_id,
                },
            )
            return False

        execution.id = model.id
        return True

    async def save(self, execution: CopyExecution) -> None:
        if execution.id is None:
            raise ValueError("CopyExecution must be claimed before save")

        existing_model = await self._session.get(CopyExecutionModel, execution.id)
        if existing_model is None:
            raise ValueError(f"CopyExecution {execution.id} not found for update")

        self._mapper.update_model_from_entity(existing_model, execution)
        await self._session.flush()

    async def get_by_id(self, execution_id: int) -> Optional[CopyExecution]:
        model = await self._session.get(CopyExecutionModel, execution_id)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_for_pair(
        self, leader_trade_id: int, relationship_id: int
    ) -> Optional[CopyExecution]:
        stmt = (
            select(CopyExecutionModel)
            .where(CopyExecutionModel.leader_trade_id == leader_trade_id)
            .where(CopyExecutionModel.relationship_id == relationship_id)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def list_for_trade(self, leader_trade_id: int) -> list[CopyExecution]:
        stmt = (
            select(CopyExecutionModel)
            .where(CopyExecutionModel.leader_trade_id == leader_trade_id)
            .order_by(CopyExecutionModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]

    async def count_successful_since(self, follower_id: int, since: datetime) -> int:
        stmt = (
            select(func.count(CopyExecutionModel.id))
            .where(CopyExecutionModel.follower_id == follower_id)
            .where(CopyExecutionModel.status == ExecutionStatus.SUCCESS.value)
            .where(CopyExecutionModel.created_at >= since)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def volume_since(self, follower_id: int, since: datetime) -> Decimal:
        stmt = (
            select(CopyExecutionModel.quantity, CopyExecutionModel.executed_price)
            .where(CopyExecutionModel.follower_id == follower_id)
            .where(CopyExecutionModel.status == ExecutionStatus.SUCCESS.value)
            .where(CopyExecutionModel.created_at >= since)
        )
        result = await self._session.execute(stmt)
        return sum(
            (quantity * (price or Decimal("0")) for quantity, price in result.all()),
            Decimal("0"),
        )

    async def get_stale(self, older_than: datetime) -> list[CopyExecution]:
        stmt = (
            select(CopyExecutionModel)
            .where(
                CopyExecutionModel.status.in_(
                    [ExecutionStatus.PENDING.value, ExecutionStatus.EXECUTING.value]
                )
            )
            .where(CopyExecutionModel.updated_at < older_than)
            .order_by(CopyExecutionModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]
