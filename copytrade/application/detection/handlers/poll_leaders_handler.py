"""PollLeaders Handler - scheduled entry point of the Trade Detector."""

import asyncio
import logging

from copytrade.application.shared import CommandHandler, UnitOfWorkFactory
from copytrade.domain.copying.entities import BrokerageConnection, Trader

from ..commands import PollLeadersCommand
from ..dtos import AccountDetection, DetectionSummary
from ..trade_detector import TradeDetector

logger = logging.getLogger(__name__)


class PollLeadersHandler(CommandHandler[PollLeadersCommand, DetectionSummary]):
    """Poll all leader accounts with bounded concurrency.

    Flow:
    1. Load leaders з credentials та active connections (окремий UoW, закривається)
    2. Для кожного connection - TradeDetector.detect_for_account під semaphore
    3. Збір DetectionSummary

    Failure одного рахунку не зупиняє інші: він рахується у failed_accounts.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        detector: TradeDetector,
        max_concurrency: int = 5,
    ) -> None:
        self._uow_factory = uow_factory
        self._detector = detector
        self._max_concurrency = max_concurrency

    async def handle(self, command: PollLeadersCommand) -> DetectionSummary:
        targets = await self._load_targets(command.leader_id)
        summary = DetectionSummary(
            leaders_polled=len({leader.id for leader, _ in targets}),
            accounts_polled=len(targets),
        )
        logger.info(
            "detection.started",
            extra={"leaders": summary.leaders_polled, "accounts": summary.accounts_polled},
        )

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def poll(leader: Trader, connection: BrokerageConnection) -> AccountDetection:
            async with semaphore:
                return await self._detector.detect_for_account(leader, connection)

        results = await asyncio.gather(
            *(poll(leader, connection) for leader, connection in targets),
            return_exceptions=True,
        )

        for (leader, connection), result in zip(targets, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                # Persistence failure для одного рахунку: лог і далі
                logger.error(
                    "detection.account_crashed",
                    extra={
                        "leader_id": leader.id,
                        "account_id": connection.account_id,
                        "error": str(result),
                    },
                    exc_info=result,
                )
                summary.failed_accounts += 1
                continue
            if result.failed:
                summary.failed_accounts += 1
            summary.trades_detected += len(result.trades)

        logger.info("detection.completed", extra=summary.to_dict())
        return summary

    async def _load_targets(
        self, leader_id: int | None
    ) -> list[tuple[Trader, BrokerageConnection]]:
        async with self._uow_factory() as uow:
            leaders = await uow.traders.get_leaders_with_active_connections()
            if leader_id is not None:
                leaders = [leader for leader in leaders if leader.id == leader_id]

            targets = []
            for leader in leaders:
                for connection in await uow.connections.get_active_for_trader(leader.id):
                    targets.append((leader, connection))
        return targets
