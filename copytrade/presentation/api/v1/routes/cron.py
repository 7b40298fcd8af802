"""Scheduler HTTP triggers - detect, process and monitor over HTTP.

Ті самі кроки, що виконують Celery beat tasks, для зовнішнього
scheduler'а (cron). Відповідь - стандартний result envelope.
"""

import logging

from fastapi import APIRouter

from copytrade.application.detection import PollLeadersCommand
from copytrade.application.execution import ProcessPendingTradesCommand
from copytrade.application.monitoring import MonitorPositionsCommand
from copytrade.presentation.api.dependencies import (
    CronAuth,
    MonitorPositionsHandlerDep,
    PollLeadersHandlerDep,
    ProcessPendingTradesHandlerDep,
    SettingsDep,
)
from copytrade.presentation.results import run_step

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["Cron"], dependencies=[CronAuth])


@router.post("/detect-trades", summary="Poll leader accounts for new trades")
async def detect_trades(handler: PollLeadersHandlerDep) -> dict:
    return await run_step(
        lambda: handler.handle(PollLeadersCommand()), logger, "api.cron.detect_trades"
    )


@router.post("/process-trades", summary="Copy pending leader trades to followers")
async def process_trades(handler: ProcessPendingTradesHandlerDep, settings: SettingsDep) -> dict:
    command = ProcessPendingTradesCommand(limit=settings.max_trades_per_run)
    return await run_step(lambda: handler.handle(command), logger, "api.cron.process_trades")


@router.post("/monitor-positions", summary="Close positions past stop-loss or take-profit")
async def monitor_positions(handler: MonitorPositionsHandlerDep) -> dict:
    return await run_step(
        lambda: handler.handle(MonitorPositionsCommand()), logger, "api.cron.monitor_positions"
    )
