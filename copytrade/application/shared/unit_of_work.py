"""Unit of Work pattern - manages transactions.

UnitOfWork забезпечує:
- Atomic operations (all or nothing)
- Transaction boundary
- Одну сесію на worker: concurrent tasks ніколи не ділять UoW
"""

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Callable, Optional, Type

from copytrade.domain.copying.repositories import (
    BrokerageConnectionRepository,
    CopyExecutionRepository,
    CopyRelationshipRepository,
    LeaderTradeRepository,
    NotificationRepository,
    PositionRepository,
    PositionSnapshotRepository,
    TraderRepository,
)


class UnitOfWork(ABC):
    """Abstract Unit of Work interface.

    Example:
        >>> async with uow_factory() as uow:
        ...     trade = await uow.leader_trades.get_by_id(123)
        ...     trade.mark_processed()
        ...     await uow.leader_trades.save(trade)
        ...     await uow.commit()
    """

    @abstractmethod
    async def __aenter__(self) -> "UnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            Якщо exc_type не None, має викликати rollback().
        """

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

    # ==================== Repositories ====================

    @property
    @abstractmethod
    def leader_trades(self) -> LeaderTradeRepository: ...

    @property
    @abstractmethod
    def snapshots(self) -> PositionSnapshotRepository: ...

    @property
    @abstractmethod
    def relationships(self) -> CopyRelationshipRepository: ...

    @property
    @abstractmethod
    def executions(self) -> CopyExecutionRepository: ...

    @property
    @abstractmethod
    def positions(self) -> PositionRepository: ...

    @property
    @abstractmethod
    def traders(self) -> TraderRepository: ...

    @property
    @abstractmethod
    def connections(self) -> BrokerageConnectionRepository: ...

    @property
    @abstractmethod
    def notifications(self) -> NotificationRepository: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]
"""Фабрика нових UoW; кожен concurrent worker бере свій."""
