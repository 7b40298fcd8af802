"""Composition root shared by the FastAPI app and the Celery workers.

Збирає engine, brokerage adapter, credential resolver та EventBus один
раз на процес і видає handlers для трьох scheduled entry points і webhook.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from copytrade.application.detection import PollLeadersHandler, TradeDetector
from copytrade.application.execution import CopyExecutor, ProcessPendingTradesHandler
from copytrade.application.ingestion import IngestWebhookTradesHandler
from copytrade.application.monitoring import MonitorPositionsHandler
from copytrade.application.notifications import NotificationRecorder
from copytrade.config import Settings
from copytrade.domain.brokerage.ports import BrokeragePort
from copytrade.domain.copying.services import CopyPolicyEvaluator
from copytrade.infrastructure.brokerage import SnapTradeBrokerageAdapter
from copytrade.infrastructure.encryption import CredentialCipher, CredentialResolver
from copytrade.infrastructure.messaging import EventBus
from copytrade.infrastructure.persistence.sqlalchemy import (
    Base,
    SQLAlchemyUnitOfWork,
    create_engine_from_settings,
    create_session_factory,
    create_unit_of_work,
)

logger = logging.getLogger(__name__)


class PipelineContainer:
    """Process-wide wiring of the copy trading pipeline.

    Example:
        >>> container = PipelineContainer.from_settings(get_settings())
        >>> summary = await container.poll_leaders_handler().handle(PollLeadersCommand())
        >>> await container.close()
    """

    def __init__(
        self,
        settings: Settings,
        session_factory: async_sessionmaker[AsyncSession],
        brokerage: BrokeragePort,
        credential_resolver: CredentialResolver,
        engine: AsyncEngine | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.settings = settings
        self.session_factory = session_factory
        self.brokerage = brokerage
        self.credential_resolver = credential_resolver
        self.engine = engine
        self.event_bus = event_bus or EventBus()

        NotificationRecorder(self.uow_factory).register(self.event_bus)

    @classmethod
    def from_settings(cls, settings: Settings) -> "PipelineContainer":
        engine = create_engine_from_settings(settings)
        cipher = CredentialCipher(settings.encryption_key) if settings.encryption_key else None
        if cipher is None:
            logger.warning("container.encryption_key_missing")
        return cls(
            settings=settings,
            session_factory=create_session_factory(engine),
            brokerage=SnapTradeBrokerageAdapter.from_settings(settings),
            credential_resolver=CredentialResolver(cipher),
            engine=engine,
        )

    def uow_factory(self) -> SQLAlchemyUnitOfWork:
        return create_unit_of_work(self.session_factory)

    async def create_tables(self) -> None:
        """Create tables from metadata (development / tests; production uses migrations)."""
        if self.engine is None:
            return
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("container.tables_created")

    # ==================== Handlers ====================

    def poll_leaders_handler(self) -> PollLeadersHandler:
        detector = TradeDetector(
            uow_factory=self.uow_factory,
            brokerage=self.brokerage,
            credential_resolver=self.credential_resolver,
            call_timeout=self.settings.brokerage_call_timeout_seconds,
        )
        return PollLeadersHandler(
            uow_factory=self.uow_factory,
            detector=detector,
            max_concurrency=self.settings.detector_max_concurrency,
        )

    def process_pending_trades_handler(self) -> ProcessPendingTradesHandler:
        executor = CopyExecutor(
            uow_factory=self.uow_factory,
            brokerage=self.brokerage,
            credential_resolver=self.credential_resolver,
            evaluator=CopyPolicyEvaluator(
                quantity_step=self.settings.quantity_step,
                default_stop_distance_percent=self.settings.default_stop_distance_percent,
            ),
            event_bus=self.event_bus,
            call_timeout=self.settings.brokerage_call_timeout_seconds,
            loss_lookback_days=self.settings.loss_lookback_days,
        )
        return ProcessPendingTradesHandler(
            uow_factory=self.uow_factory,
            executor=executor,
            event_bus=self.event_bus,
            max_concurrency=self.settings.executor_max_concurrency,
            stale_after_seconds=self.settings.execution_stale_after_seconds,
        )

    def monitor_positions_handler(self) -> MonitorPositionsHandler:
        return MonitorPositionsHandler(
            uow_factory=self.uow_factory,
            brokerage=self.brokerage,
            credential_resolver=self.credential_resolver,
            event_bus=self.event_bus,
            call_timeout=self.settings.brokerage_call_timeout_seconds,
            claim_ttl_seconds=self.settings.execution_stale_after_seconds,
        )

    def ingest_webhook_trades_handler(self) -> IngestWebhookTradesHandler:
        return IngestWebhookTradesHandler(
            uow_factory=self.uow_factory,
            dedup_window_seconds=self.settings.webhook_dedup_window_seconds,
        )

    async def close(self) -> None:
        await self.brokerage.close()
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("container.closed")
