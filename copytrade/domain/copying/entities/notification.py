"""Notification entity - запис для follower'а про результат копіювання."""

from datetime import datetime, timezone
from typing import Any, Optional

from copytrade.domain.shared import Entity

from ..value_objects import NotificationKind


class Notification(Entity):
    def __init__(
        self,
        user_id: int,
        kind: NotificationKind,
        title: str,
        message: str,
        payload: Optional[dict[str, Any]] = None,
        created_at: Optional[datetime] = None,
        id: Optional[int] = None,
    ) -> None:
        super().__init__(id)
        self.user_id = user_id
        self.kind = kind
        self.title = title
        self.message = message
        self.payload = payload or {}
        self.created_at = created_at or datetime.now(timezone.utc)
