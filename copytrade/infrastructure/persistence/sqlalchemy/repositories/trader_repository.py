"""SQLAlchemy implementations of Trader, BrokerageConnection та Notification repositories."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from copytrade.domain.copying.entities import BrokerageConnection, Notification, Trader
from copytrade.domain.copying.repositories import (
    BrokerageConnectionRepository as BrokerageConnectionRepositoryPort,
    NotificationRepository as NotificationRepositoryPort,
    TraderRepository as TraderRepositoryPort,
)
from copytrade.domain.copying.value_objects import ConnectionStatus, TraderRole
from copytrade.infrastructure.persistence.sqlalchemy.mappers import (
    BrokerageConnectionMapper,
    NotificationMapper,
    TraderMapper,
)
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    BrokerageConnectionModel,
    NotificationModel,
    TraderModel,
)


class SQLAlchemyTraderRepository(TraderRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = TraderMapper()

    async def save(self, trader: Trader) -> None:
        if trader.id is None:
            model = self._mapper.to_model(trader)
            self._session.add(model)
            await self._session.flush()
            trader.id = model.id
            return

        existing_model = await self._session.get(TraderModel, trader.id)
        if existing_model is None:
            raise ValueError(f"Trader {trader.id} not found for update")
        self._mapper.update_model_from_entity(existing_model, trader)
        await self._session.flush()

    async def get_by_id(self, trader_id: int) -> Optional[Trader]:
        model = await self._session.get(TraderModel, trader_id)
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_by_brokerage_user_id(self, brokerage_user_id: str) -> Optional[Trader]:
        stmt = select(TraderModel).where(TraderModel.brokerage_user_id == brokerage_user_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        return self._mapper.to_entity(model)

    async def get_leaders_with_active_connections(self) -> list[Trader]:
        has_active_connection = (
            select(BrokerageConnectionModel.id)
            .where(BrokerageConnectionModel.trader_id == TraderModel.id)
            .where(BrokerageConnectionModel.status == ConnectionStatus.ACTIVE.value)
            .exists()
        )
        stmt = (
            select(TraderModel)
            .where(TraderModel.role.in_([TraderRole.LEADER.value, TraderRole.BOTH.value]))
            .where(TraderModel.brokerage_user_id.isnot(None))
            .where(TraderModel.brokerage_user_secret.isnot(None))
            .where(has_active_connection)
            .order_by(TraderModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]


class SQLAlchemyBrokerageConnectionRepository(BrokerageConnectionRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = BrokerageConnectionMapper()

    async def save(self, connection: BrokerageConnection) -> None:
        if connection.id is None:
            model = self._mapper.to_model(connection)
            self._session.add(model)
            await self._session.flush()
            connection.id = model.id
            return

        existing_model = await self._session.get(BrokerageConnectionModel, connection.id)
        if existing_model is None:
            raise ValueError(f"BrokerageConnection {connection.id} not found for update")
        self._mapper.update_model_from_entity(existing_model, connection)
        await self._session.flush()

    async def get_active_for_trader(self, trader_id: int) -> list[BrokerageConnection]:
        stmt = (
            select(BrokerageConnectionModel)
            .where(BrokerageConnectionModel.trader_id == trader_id)
            .where(BrokerageConnectionModel.status == ConnectionStatus.ACTIVE.value)
            .order_by(BrokerageConnectionModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]


class SQLAlchemyNotificationRepository(NotificationRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = NotificationMapper()

    async def add(self, notification: Notification) -> None:
        model = self._mapper.to_model(notification)
        self._session.add(model)
        await self._session.flush()
        notification.id = model.id

    async def list_for_user(self, user_id: int, limit: int = 50) -> list[Notification]:
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._mapper.to_entity(model) for model in result.scalars().all()]
