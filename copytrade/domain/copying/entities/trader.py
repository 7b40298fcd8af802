"""Trader entity - користувач платформи (leader, follower або обидва)."""

from datetime import datetime, timezone
from typing import Optional

from copytrade.domain.shared import Entity

from ..value_objects import TraderRole


class Trader(Entity):
    """Platform user with opaque brokerage-aggregator credentials.

    ``brokerage_user_secret`` зберігається зашифрованим; розшифровує його
    CredentialResolver в infrastructure layer.
    """

    def __init__(
        self,
        display_name: str,
        role: TraderRole,
        brokerage_user_id: Optional[str] = None,
        brokerage_user_secret: Optional[str] = None,
        created_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)
        self.display_name = display_name
        self.role = role
        self.brokerage_user_id = brokerage_user_id
        self.brokerage_user_secret = brokerage_user_secret
        self.created_at = created_at or datetime.now(timezone.utc)

    @property
    def is_leader(self) -> bool:
        return self.role.can_lead

    @property
    def has_brokerage_credentials(self) -> bool:
        return bool(self.brokerage_user_id and self.brokerage_user_secret)
