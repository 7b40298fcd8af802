"""CopyExecution Mapper."""

from copytrade.domain.copying.entities import CopyExecution
from copytrade.domain.copying.value_objects import ExecutionStatus, TradeSide
from copytrade.infrastructure.persistence.sqlalchemy.models import CopyExecutionModel

from ._time import as_utc


class CopyExecutionMapper:
    def to_entity(self, model: CopyExecutionModel) -> CopyExecution:
        execution = CopyExecution(
            id=model.id,
            relationship_id=model.relationship_id,
            leader_trade_id=model.leader_trade_id,
            follower_id=model.follower_id,
            leader_id=model.leader_id,
            symbol=model.symbol,
            side=TradeSide(model.side),
            quantity=model.quantity,
            status=ExecutionStatus(model.status),
            reason=model.reason,
            brokerage_order_id=model.brokerage_order_id,
            executed_price=model.executed_price,
            created_at=as_utc(model.created_at),
            executed_at=as_utc(model.executed_at),
            updated_at=as_utc(model.updated_at),
        )
        execution.clear_domain_events()
        return execution

    def to_model(self, entity: CopyExecution) -> CopyExecutionModel:
        model = CopyExecutionModel(
            id=entity.id,
            relationship_id=entity.relationship_id,
            leader_trade_id=entity.leader_trade_id,
            follower_id=entity.follower_id,
            leader_id=entity.leader_id,
            symbol=entity.symbol,
            side=entity.side.value,
            created_at=entity.created_at,
            version=1,
        )
        self._copy_state(model, entity)
        return model

    def update_model_from_entity(
        self, model: CopyExecutionModel, entity: CopyExecution
    ) -> CopyExecutionModel:
        """Переносить тільки state machine поля; identity пари незмінна."""
        self._copy_state(model, entity)
        model.version += 1
        return model

    @staticmethod
    def _copy_state(model: CopyExecutionModel, entity: CopyExecution) -> None:
        model.quantity = entity.quantity
        model.status = entity.status.value
        model.reason = entity.reason
        model.brokerage_order_id = entity.brokerage_order_id
        model.executed_price = entity.executed_price
        model.executed_at = entity.executed_at
        model.updated_at = entity.updated_at
