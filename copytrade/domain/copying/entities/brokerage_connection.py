"""BrokerageConnection entity - підключений брокерський рахунок trader'а."""

from datetime import datetime, timezone
from typing import Optional

from copytrade.domain.shared import Entity

from ..value_objects import ConnectionStatus


class BrokerageConnection(Entity):
    def __init__(
        self,
        trader_id: int,
        account_id: str,
        brokerage_name: str = "",
        status: ConnectionStatus = ConnectionStatus.ACTIVE,
        created_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)
        self.trader_id = trader_id
        self.account_id = account_id
        self.brokerage_name = brokerage_name
        self.status = status
        self.created_at = created_at or datetime.now(timezone.utc)

    @property
    def is_active(self) -> bool:
        return self.status is ConnectionStatus.ACTIVE

    def disable(self) -> None:
        self.status = ConnectionStatus.DISABLED
