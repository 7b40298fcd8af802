"""NotificationRepository Port."""

from abc import ABC, abstractmethod

from ..entities import Notification


class NotificationRepository(ABC):
    @abstractmethod
    async def add(self, notification: Notification) -> None:
        pass

    @abstractmethod
    async def list_for_user(self, user_id: int, limit: int = 50) -> list[Notification]:
        """Newest first."""
