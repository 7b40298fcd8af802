"""Trader, BrokerageConnection та Notification mappers."""

from copytrade.domain.copying.entities import BrokerageConnection, Notification, Trader
from copytrade.domain.copying.value_objects import (
    ConnectionStatus,
    NotificationKind,
    TraderRole,
)
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    BrokerageConnectionModel,
    NotificationModel,
    TraderModel,
)

from ._time import as_utc


class TraderMapper:
    def to_entity(self, model: TraderModel) -> Trader:
        return Trader(
            id=model.id,
            display_name=model.display_name,
            role=TraderRole(model.role),
            brokerage_user_id=model.brokerage_user_id,
            brokerage_user_secret=model.brokerage_user_secret,
            created_at=as_utc(model.created_at),
        )

    def to_model(self, entity: Trader) -> TraderModel:
        model = TraderModel(id=entity.id)
        self.update_model_from_entity(model, entity)
        return model

    def update_model_from_entity(self, model: TraderModel, entity: Trader) -> TraderModel:
        model.display_name = entity.display_name
        model.role = entity.role.value
        model.brokerage_user_id = entity.brokerage_user_id
        model.brokerage_user_secret = entity.brokerage_user_secret
        model.created_at = entity.created_at
        return model


class BrokerageConnectionMapper:
    def to_entity(self, model: BrokerageConnectionModel) -> BrokerageConnection:
        return BrokerageConnection(
            id=model.id,
            trader_id=model.trader_id,
            account_id=model.account_id,
            brokerage_name=model.brokerage_name or "",
            status=ConnectionStatus(model.status),
            created_at=as_utc(model.created_at),
        )

    def to_model(self, entity: BrokerageConnection) -> BrokerageConnectionModel:
        model = BrokerageConnectionModel(id=entity.id)
        self.update_model_from_entity(model, entity)
        return model

    def update_model_from_entity(
        self, model: BrokerageConnectionModel, entity: BrokerageConnection
    ) -> BrokerageConnectionModel:
        model.trader_id = entity.trader_id
        model.account_id = entity.account_id
        model.brokerage_name = entity.brokerage_name
        model.status = entity.status.value
        model.created_at = entity.created_at
        return model


class NotificationMapper:
    def to_entity(self, model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            kind=NotificationKind(model.kind),
            title=model.title,
            message=model.message,
            payload=dict(model.payload or {}),
            created_at=as_utc(model.created_at),
        )

    def to_model(self, entity: Notification) -> NotificationModel:
        return NotificationModel(
            user_id=entity.user_id,
            kind=entity.kind.value,
            title=entity.title,
            message=entity.message,
            payload=entity.payload,
            created_at=entity.created_at,
        )
