"""CopyRelationship Mapper."""

from copytrade.domain.copying.entities import CopyRelationship
from copytrade.domain.copying.value_objects import (
    AllocationMethod,
    AssetClass,
    RelationshipStatus,
)
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyRelationshipModel

from ._time import as_utc


class CopyRelationshipMapper:
    def to_entity(self, model: CopyRelationshipModel) -> CopyRelationship:
        relationship = CopyRelationship(
            id=model.id,
            follower_id=model.follower_id,
            leader_id=model.leader_id,
            allocation_method=AllocationMethod(model.allocation_method),
            allocation_value=model.allocation_value,
            status=RelationshipStatus(model.status),
            max_position_size=model.max_position_size,
            max_risk_per_trade=model.max_risk_per_trade,
            allowed_asset_classes=[AssetClass(value) for value in model.allowed_asset_classes or []],
            stop_copying_threshold=model.stop_copying_threshold,
            copy_stop_loss=model.copy_stop_loss,
            copy_take_profit=model.copy_take_profit,
            custom_stop_loss_percent=model.custom_stop_loss_percent,
            custom_take_profit_percent=model.custom_take_profit_percent,
            trailing_stop=model.trailing_stop,
            max_open_positions=model.max_open_positions,
            max_daily_trades=model.max_daily_trades,
            max_daily_volume=model.max_daily_volume,
            max_position_concentration=model.max_position_concentration,
            skip_penny_stocks=model.skip_penny_stocks,
            min_stock_price=model.min_stock_price,
            max_stock_price=model.max_stock_price,
            total_trades_copied=model.total_trades_copied,
            created_at=as_utc(model.created_at),
            stopped_at=as_utc(model.stopped_at),
        )
        relationship.clear_domain_events()
        return relationship

    def to_model(self, entity: CopyRelationship) -> CopyRelationshipModel:
        model = CopyRelationshipModel(id=entity.id, version=1)
        self._copy_fields(model, entity)
        return model

    def update_model_from_entity(
        self, model: CopyRelationshipModel, entity: CopyRelationship
    ) -> CopyRelationshipModel:
        self._copy_fields(model, entity)
        model.version += 1
        return model

    @staticmethod
    def _copy_fields(model: CopyRelationshipModel, entity: CopyRelationship) -> None:
        model.follower_id = entity.follower_id
        model.leader_id = entity.leader_id
        model.status = entity.status.value
        model.allocation_method = entity.allocation_method.value
        model.allocation_value = entity.allocation_value
        model.max_position_size = entity.max_position_size
        model.max_risk_per_trade = entity.max_risk_per_trade
        model.allowed_asset_classes = sorted(a.value for a in entity.allowed_asset_classes) or None
        model.stop_copying_threshold = entity.stop_copying_threshold
        model.copy_stop_loss = entity.copy_stop_loss
        model.copy_take_profit = entity.copy_take_profit
        model.custom_stop_loss_percent = entity.custom_stop_loss_percent
        model.custom_take_profit_percent = entity.custom_take_profit_percent
        model.trailing_stop = entity.trailing_stop
        model.max_open_positions = entity.max_open_positions
        model.max_daily_trades = entity.max_daily_trades
        model.max_daily_volume = entity.max_daily_volume
        model.max_position_concentration = entity.max_position_concentration
        model.skip_penny_stocks = entity.skip_penny_stocks
        model.min_stock_price = entity.min_stock_price
        model.max_stock_price = entity.max_stock_price
        model.total_trades_copied = entity.total_trades_copied
        model.created_at = entity.created_at
        model.stopped_at = entity.stopped_at
