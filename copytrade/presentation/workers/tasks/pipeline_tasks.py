"""Pipeline Celery Tasks.

Тонка обгортка навколо application layer handlers: кожен task будує
PipelineContainer, виконує один крок і повертає result envelope.

Architecture:
    Celery beat → detect_leader_trades   → PollLeadersHandler
                → process_pending_trades → ProcessPendingTradesHandler
                → monitor_open_positions → MonitorPositionsHandler

Tasks не ретраїться Celery'єю: наступний beat tick і є retry, а
повтор process_pending_trades захищений claim'ами.
"""

import asyncio
import logging
import uuid
from functools import wraps
from typing import Any, Awaitable, Callable

from celery import shared_task

from copytrade.application.detection import PollLeadersCommand
from copytrade.application.execution import ProcessPendingTradesCommand
from copytrade.application.monitoring import MonitorPositionsCommand
from copytrade.config import (
    bind_request_context,
    clear_request_context,
    get_settings,
    setup_logging,
)
from copytrade.presentation.container import PipelineContainer
from copytrade.presentation.results import run_step

logger = logging.getLogger(__name__)


def async_task(f):
    """Decorator to run async function in Celery task."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            return loop.run_until_complete(f(*args, **kwargs))
        finally:
            loop.close()

    return wrapper


async def run_with_container(
    task_name: str,
    step: Callable[[PipelineContainer], Awaitable[Any]],
) -> dict[str, Any]:
    """Run one pipeline step with a container scoped to this task's event loop.

    Engine та HTTP client прив'язані до event loop, тому container
    створюється і закривається в межах одного виклику.
    """
    settings = get_settings()
    setup_logging(settings)
    bind_request_context(request_id=str(uuid.uuid4()), task=task_name)

    container = PipelineContainer.from_settings(settings)
    try:
        return await run_step(lambda: step(container), logger, f"task.{task_name}")
    finally:
        await container.close()
        clear_request_context()


@shared_task(name="copytrade.presentation.workers.tasks.pipeline_tasks.detect_leader_trades")
@async_task
async def detect_leader_trades() -> dict[str, Any]:
    """Poll leader accounts and persist detected trades.

    Example:
        >>> detect_leader_trades.delay()
    """
    return await run_with_container(
        "detect_leader_trades",
        lambda c: c.poll_leaders_handler().handle(PollLeadersCommand()),
    )


@shared_task(name="copytrade.presentation.workers.tasks.pipeline_tasks.process_pending_trades")
@async_task
async def process_pending_trades(limit: int | None = None) -> dict[str, Any]:
    """Copy unprocessed leader trades to followers.

    Args:
        limit: Max leader trades (default: settings.max_trades_per_run).
    """
    return await run_with_container(
        "process_pending_trades",
        lambda c: c.process_pending_trades_handler().handle(
            ProcessPendingTradesCommand(limit=limit or c.settings.max_trades_per_run)
        ),
    )


@shared_task(name="copytrade.presentation.workers.tasks.pipeline_tasks.monitor_open_positions")
@async_task
async def monitor_open_positions() -> dict[str, Any]:
    """Close positions whose stop-loss or take-profit has been crossed."""
    return await run_with_container(
        "monitor_open_positions",
        lambda c: c.monitor_positions_handler().handle(MonitorPositionsCommand()),
    )
