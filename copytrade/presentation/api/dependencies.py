"""Dependency injection for FastAPI.

Provides dependencies для API routes:
- PipelineContainer (initialized в lifespan)
- Handlers для cron та webhook routes
- Cron bearer authentication
"""

import hmac
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from copytrade.application.detection import PollLeadersHandler
from copytrade.application.execution import ProcessPendingTradesHandler
from copytrade.application.ingestion import IngestWebhookTradesHandler
from copytrade.application.monitoring import MonitorPositionsHandler
from copytrade.config import Settings
from copytrade.presentation.container import PipelineContainer

# ============================================================================
# GLOBAL DEPENDENCIES (будуть initialized в main.py)
# ============================================================================

_container: PipelineContainer | None = None


def init_dependencies(container: PipelineContainer) -> None:
    """Initialize global dependencies.

    Note:
        Викликається при FastAPI startup (в main.py).
    """
    global _container
    _container = container


def reset_dependencies() -> None:
    global _container
    _container = None


def get_container() -> PipelineContainer:
    """Get the process-wide container.

    Raises:
        RuntimeError: If dependencies not initialized.
    """
    if _container is None:
        raise RuntimeError(
            "Dependencies not initialized. Call init_dependencies() first."
        )
    return _container


ContainerDep = Annotated[PipelineContainer, Depends(get_container)]


def get_app_settings(container: ContainerDep) -> Settings:
    return container.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# ============================================================================
# AUTHENTICATION
# ============================================================================


async def verify_cron_secret(
    settings: SettingsDep,
    authorization: Annotated[str | None, Header()] = None,
) -> None:
    """Check ``Authorization: Bearer <cron_secret>``.

    Без налаштованого cron_secret перевірка пропускається тільки поза
    production.

    Raises:
        HTTPException: 401 if unauthorized.
    """
    expected = settings.cron_secret
    if not expected:
        if settings.is_production:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Cron secret not configured",
            )
        return

    token = ""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            token = parts[1]

    if not hmac.compare_digest(token.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


CronAuth = Depends(verify_cron_secret)


# ============================================================================
# HANDLERS
# ============================================================================


def get_poll_leaders_handler(container: ContainerDep) -> PollLeadersHandler:
    return container.poll_leaders_handler()


def get_process_pending_trades_handler(container: ContainerDep) -> ProcessPendingTradesHandler:
    return container.process_pending_trades_handler()


def get_monitor_positions_handler(container: ContainerDep) -> MonitorPositionsHandler:
    return container.monitor_positions_handler()


def get_ingest_webhook_trades_handler(container: ContainerDep) -> IngestWebhookTradesHandler:
    return container.ingest_webhook_trades_handler()


# ============================================================================
# TYPE ALIASES (для cleaner route signatures)
# ============================================================================

PollLeadersHandlerDep = Annotated[PollLeadersHandler, Depends(get_poll_leaders_handler)]
ProcessPendingTradesHandlerDep = Annotated[
    ProcessPendingTradesHandler, Depends(get_process_pending_trades_handler)
]
MonitorPositionsHandlerDep = Annotated[
    MonitorPositionsHandler, Depends(get_monitor_positions_handler)
]
IngestWebhookTradesHandlerDep = Annotated[
    IngestWebhookTradesHandler, Depends(get_ingest_webhook_trades_handler)
]
