"""Position Mapper - converts between Position entity and PositionModel ORM."""

from copytrade.domain.copying.entities import Position
from copytrade.domain.copying.value_objects import ExitReason, PositionStatus
from copytrade.infrastructure.persistence.sqlalchemy.models import PositionModel

from ._time import as_utc


class PositionMapper:
    """Mapper для Position entity ↔ PositionModel ORM.

    Example:
        >>> mapper = PositionMapper()
        >>> model = mapper.to_model(position)      # Domain → ORM
        >>> position_back = mapper.to_entity(model)  # ORM → Domain
    """

    def to_entity(self, model: PositionModel) -> Position:
        position = Position(
            id=model.id,
            owner_id=model.owner_id,
            account_id=model.account_id,
            symbol=model.symbol,
            quantity=model.quantity,
            average_cost=model.average_cost,
            relationship_id=model.relationship_id,
            current_price=model.current_price,
            stop_loss=model.stop_loss,
            take_profit=model.take_profit,
            status=PositionStatus(model.status),
            exit_reason=ExitReason(model.exit_reason) if model.exit_reason else None,
            exit_price=model.exit_price,
            opened_at=as_utc(model.opened_at),
            closed_at=as_utc(model.closed_at),
        )

        # ВАЖЛИВО: Clear domain events (не хочемо replay events з DB)
        position.clear_domain_events()

        return position

    def to_model(self, entity: Position) -> PositionModel:
        model = PositionModel(id=entity.id, version=1)
        self._copy_fields(model, entity)
        return model

    def update_model_from_entity(
        self, model: PositionModel, entity: Position
    ) -> PositionModel:
        """Update існуючого PositionModel з domain entity (preserve model.id)."""
        self._copy_fields(model, entity)

        # Increment version (optimistic locking)
        model.version += 1

        return model

    @staticmethod
    def _copy_fields(model: PositionModel, entity: Position) -> None:
        model.owner_id = entity.owner_id
        model.relationship_id = entity.relationship_id
        model.account_id = entity.account_id
        model.symbol = entity.symbol
        model.status = entity.status.value
        model.quantity = entity.quantity
        model.average_cost = entity.average_cost
        model.current_price = entity.current_price
        model.stop_loss = entity.stop_loss
        model.take_profit = entity.take_profit
        model.exit_reason = entity.exit_reason.value if entity.exit_reason else None
        model.exit_price = entity.exit_price
        model.opened_at = entity.opened_at
        model.closed_at = entity.closed_at
