"""FastAPI application - copy trading pipeline.

HTTP surface:
- Health check endpoints (liveness/readiness)
- Scheduler triggers (/api/v1/cron/*) для detect / process / monitor
- Brokerage webhook ingress (/api/v1/webhooks/brokerage)

Run with: uvicorn copytrade.main:app
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.base import BaseHTTPMiddleware

from copytrade.config import (
    Settings,
    bind_request_context,
    clear_request_context,
    get_logger,
    get_settings,
    setup_logging,
)
from copytrade.domain.shared import DomainException
from copytrade.presentation.api import dependencies
from copytrade.presentation.api.v1.routes import cron_router, webhooks_router
from copytrade.presentation.container import PipelineContainer

APP_VERSION = "1.0.0"

logger = get_logger(__name__)


# ============================================================================
# MIDDLEWARE
# ============================================================================


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to add request correlation ID to all log messages."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))

        bind_request_context(
            request_id=request_id,
            path=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_request_context()


# ============================================================================
# ERROR HANDLERS
# ============================================================================


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors (422)."""
    logger.warning(
        "api.validation_error",
        path=request.url.path,
        errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "details": jsonable_errors(exc),
        },
    )


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    logger.warning(
        "api.domain_error",
        path=request.url.path,
        error=exc.message,
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": type(exc).__name__, "message": exc.message},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions (500)."""
    logger.exception(
        "api.unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "InternalServerError",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app(
    settings: Settings | None = None,
    container: PipelineContainer | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Settings (default: get_settings()).
        container: Готовий container (tests); інакше створюється з settings
            у lifespan і закривається при shutdown.
    """
    settings = settings or (container.settings if container else get_settings())
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: container + tables (якщо db_create_tables). Shutdown: close."""
        logger.info("application.startup.started")

        owned = container is None
        active = container or PipelineContainer.from_settings(settings)
        if settings.db_create_tables:
            await active.create_tables()
        dependencies.init_dependencies(active)
        app.state.container = active

        logger.info("application.startup.completed")
        yield

        logger.info("application.shutdown.started")
        dependencies.reset_dependencies()
        if owned:
            await active.close()
        logger.info("application.shutdown.completed")

    app = FastAPI(
        title=settings.app_name,
        description="Leader → follower trade replication pipeline.",
        version=APP_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Order matters - last added is executed first
    app.add_middleware(RequestContextMiddleware)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # ==================== Health ====================

    @app.get("/health", tags=["Health"], summary="Health check (liveness)")
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    @app.get("/health/ready", tags=["Health"], summary="Readiness check")
    async def readiness_check() -> JSONResponse:
        """Checks database connectivity."""
        checks = {"database": "unknown"}
        healthy = True

        try:
            active = dependencies.get_container()
            async with active.session_factory() as session:
                await session.execute(text("SELECT 1"))
            checks["database"] = "healthy"
        except Exception as e:
            checks["database"] = f"unhealthy: {str(e)[:50]}"
            healthy = False

        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "checks": checks,
            },
        )

    @app.get("/health/live", tags=["Health"], summary="Liveness probe")
    async def liveness_check() -> dict:
        return {"status": "alive"}

    app.include_router(cron_router, prefix="/api/v1")
    app.include_router(webhooks_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("copytrade.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
