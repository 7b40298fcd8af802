"""Base CommandHandler - orchestrates one use case."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from .command import Command

TCommand = TypeVar("TCommand", bound=Command)
TResult = TypeVar("TResult")


class CommandHandler(ABC, Generic[TCommand, TResult]):
    """Base class для command handlers.

    Handler відповідає за:
    - Load aggregates через Unit of Work
    - Виклик pure domain services (diff, policy, risk triggers)
    - Виклик BrokeragePort
    - Commit та publish domain events

    Handlers викликаються однаково з Celery tasks, FastAPI routes і тестів.

    Example:
        >>> handler = MonitorPositionsHandler(uow_factory, brokerage, resolver)
        >>> summary = await handler.handle(MonitorPositionsCommand())
        >>> summary.closed
        1
    """

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        """Handle command and return result.

        Args:
            command: Command to handle.

        Returns:
            Use case summary.

        Raises:
            DomainException: If business rule violated.
        """
        pass
