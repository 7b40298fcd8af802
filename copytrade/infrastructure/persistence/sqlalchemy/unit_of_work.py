"""SQLAlchemy Unit of Work implementation."""

import logging
from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from copytrade.application.shared import UnitOfWork
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
from copytrade.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyBrokerageConnectionRepository,
    SQLAlchemyCopyExecutionRepository,
    SQLAlchemyCopyRelationshipRepository,
    SQLAlchemyLeaderTradeRepository,
    SQLAlchemyNotificationRepository,
    SQLAlchemyPositionRepository,
    SQLAlchemyPositionSnapshotRepository,
    SQLAlchemyTraderRepository,
)

logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of Unit of Work pattern.

    Відповідальності:
    - Керування SQLAlchemy async session
    - Transaction management (commit/rollback)
    - Automatic rollback при exceptions
    - Lazy initialization of repositories

    Один UoW = одна AsyncSession. Паралельні workers execution engine'а
    створюють власні UoW через factory і ніколи не ділять сесію.

    Example:
        >>> uow = SQLAlchemyUnitOfWork(session_factory)
        >>> async with uow:
        ...     execution = CopyExecution.claim(trade, relationship)
        ...     if await uow.executions.claim(execution):
        ...         await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None
        self._repositories: dict[str, object] = {}

    async def __aenter__(self) -> "SQLAlchemyUnitOfWork":
        self._session = self._session_factory()
        logger.debug("unit_of_work.started")
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Exit async context manager.

        Note:
            - Якщо exc_type не None → rollback
            - Завжди закриває session (cleanup)
        """
        try:
            if exc_type is not None:
                await self.rollback()
                logger.warning(
                    "unit_of_work.rolled_back",
                    extra={"exception_type": exc_type.__name__},
                )
        finally:
            if self._session:
                await self._session.close()
                self._session = None
                self._repositories.clear()

            logger.debug("unit_of_work.closed")

    async def commit(self) -> None:
        """Commit transaction.

        Raises:
            Exception: If commit failed (DB error, constraint violation, etc.).
        """
        session = self._require_session()
        try:
            await session.commit()
            logger.debug("unit_of_work.committed")
        except Exception as e:
            logger.error("unit_of_work.commit_failed", extra={"error": str(e)})
            await self.rollback()
            raise

    async def rollback(self) -> None:
        await self._require_session().rollback()
        logger.debug("unit_of_work.rolled_back")

    # ==================== Repositories (lazy) ====================

    @property
    def leader_trades(self) -> LeaderTradeRepository:
        return self._repository("leader_trades", SQLAlchemyLeaderTradeRepository)

    @property
    def snapshots(self) -> PositionSnapshotRepository:
        return self._repository("snapshots", SQLAlchemyPositionSnapshotRepository)

    @property
    def relationships(self) -> CopyRelationshipRepository:
        return self._repository("relationships", SQLAlchemyCopyRelationshipRepository)

    @property
    def executions(self) -> CopyExecutionRepository:
        return self._repository("executions", SQLAlchemyCopyExecutionRepository)

    @property
    def positions(self) -> PositionRepository:
        return self._repository("positions", SQLAlchemyPositionRepository)

    @property
    def traders(self) -> TraderRepository:
        return self._repository("traders", SQLAlchemyTraderRepository)

    @property
    def connections(self) -> BrokerageConnectionRepository:
        return self._repository("connections", SQLAlchemyBrokerageConnectionRepository)

    @property
    def notifications(self) -> NotificationRepository:
        return self._repository("notifications", SQLAlchemyNotificationRepository)

    def _repository(self, name: str, factory):
        session = self._require_session()
        if name not in self._repositories:
            self._repositories[name] = factory(session)
        return self._repositories[name]

    def _require_session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("Unit of Work not started (use async with)")
        return self._session


def create_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> SQLAlchemyUnitOfWork:
    """Factory для створення Unit of Work.

    Example:
        >>> engine = create_async_engine("postgresql+asyncpg://...")
        >>> session_factory = async_sessionmaker(engine, expire_on_commit=False)
        >>> uow = create_unit_of_work(session_factory)
    """
    return SQLAlchemyUnitOfWork(session_factory)
