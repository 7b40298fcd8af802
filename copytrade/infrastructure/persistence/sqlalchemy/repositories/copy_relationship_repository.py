"""SQLAlchemy implementation of CopyRelationshipRepository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copying.entities import CopyRelationship
from copytrade.domain.copying.exceptions import DuplicateRelationshipError
from copytrade.domain.copying.repositories import (
    CopyRelationshipRepository as CopyRelationshipRepositoryPort,
)
from copytrade.domain.copying.value_objects import RelationshipStatus
from copytrade.infrastructure.persistence.sqlalchemy.mappers import CopyRelationshipMapper
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyRelationshipModel


class SQLAlchemyCopyRelationshipRepository(CopyRelationshipRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = CopyRelationshipMapper()

    async def add(self, relationship: CopyRelationship) -> None:
        """INSERT нового relationship.

        Raises:
            DuplicateRelationshipError: Unique (follower_id, leader_id) порушено.
                Session при цьому відкочується.
        """
        model = self._mapper.to_model(relationship)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            raise DuplicateRelationshipError(
                "Follower already copies this leader",
                follower_id=relationship.follower_id,
                leader_id=relationship.leader_id,
            ) from e
        relationship.id = model.id

    async def save(self, relationship: CopyRelationship) -> None:
        if relationship.id is None:
            await self.add(relationship)
            return

        existing_model = await self._session.get(CopyRelationshipModel, relationship.id)
        if existing_model is None:
            raise ValueError(f"CopyRelationship {relationship.id} not found for update")

        self._mapper.update_model_from_entity(existing_model, relationship)
        await self._session.flush()

    async def get_by_id(self, relationship_id: int) -> Optional[CopyRelationship]:
        model = await self._session.get(CopyRelationshipModel, relationship_id)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_active_for_leader(self, leader_id: int) -> list[CopyRelationship]:
        stmt = (
            select(CopyRelationshipModel)
            .where(CopyRelationshipModel.leader_id == leader_id)
            .where(CopyRelationshipModel.status == RelationshipStatus.ACTIVE.value)
            .order_by(CopyRelationshipModel.id.asc())
        )

        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]
