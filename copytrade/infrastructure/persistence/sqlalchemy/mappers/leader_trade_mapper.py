"""LeaderTrade та PositionSnapshot mappers."""

from decimal import Decimal

from copytrade.domain.copying.entities import LeaderTrade, PositionSnapshot
from copytrade.domain.copying.value_objects import AssetClass, TradeSide, TradeSource
from copytrade.infrastructure.persistence.sqlalchemy.models import (
    LeaderTradeModel,
    PositionSnapshotModel,
)

from ._time import as_utc


class LeaderTradeMapper:
    """Mapper для LeaderTrade entity ↔ LeaderTradeModel ORM."""

    def to_entity(self, model: LeaderTradeModel) -> LeaderTrade:
        trade = LeaderTrade(
            id=model.id,
            leader_id=model.leader_id,
            account_id=model.account_id,
            symbol=model.symbol,
            side=TradeSide(model.side),
            quantity=model.quantity,
            price=model.price,
            order_type=model.order_type,
            asset_class=AssetClass(model.asset_class),
            source=TradeSource(model.source),
            brokerage_order_id=model.brokerage_order_id,
            is_exit=model.is_exit,
            stop_loss_price=model.stop_loss_price,
            take_profit_price=model.take_profit_price,
            detected_at=as_utc(model.detected_at),
            executed_at=as_utc(model.executed_at),
            processed=model.processed,
        )
        trade.clear_domain_events()
        return trade

    def to_model(self, entity: LeaderTrade) -> LeaderTradeModel:
        return LeaderTradeModel(
            id=entity.id,
            leader_id=entity.leader_id,
            account_id=entity.account_id,
            symbol=entity.symbol,
            side=entity.side.value,
            quantity=entity.quantity,
            price=entity.price,
            order_type=entity.order_type,
            asset_class=entity.asset_class.value,
            source=entity.source.value,
            brokerage_order_id=entity.brokerage_order_id,
            is_exit=entity.is_exit,
            stop_loss_price=entity.stop_loss_price,
            take_profit_price=entity.take_profit_price,
            detected_at=entity.detected_at,
            executed_at=entity.executed_at,
            processed=entity.processed,
            version=1,
        )

    def update_model_from_entity(
        self, model: LeaderTradeModel, entity: LeaderTrade
    ) -> LeaderTradeModel:
        """Append-only: єдине поле, яке змінюється - ``processed``."""
        model.processed = entity.processed
        model.version += 1
        return model


class PositionSnapshotMapper:
    """Mapper для PositionSnapshot ↔ PositionSnapshotModel.

    Quantities зберігаються рядками, щоб JSON не перетворив Decimal на float.
    """

    def to_entity(self, model: PositionSnapshotModel) -> PositionSnapshot:
        positions = {symbol: Decimal(quantity) for symbol, quantity in (model.positions or {}).items()}
        return PositionSnapshot(
            id=model.id,
            account_id=model.account_id,
            positions=positions,
            captured_at=as_utc(model.captured_at),
            previous_snapshot_id=model.previous_snapshot_id,
        )

    def to_model(self, entity: PositionSnapshot) -> PositionSnapshotModel:
        return PositionSnapshotModel(
            account_id=entity.account_id,
            positions={symbol: str(quantity) for symbol, quantity in entity.positions.items()},
            captured_at=entity.captured_at,
            previous_snapshot_id=entity.previous_snapshot_id,
        )
