"""Envelope returned by every scheduled invocation (Celery task or cron route)."""

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable


def success_result(result: dict[str, Any]) -> dict[str, Any]:
    return {
        "success": True,
        "result": result,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def failure_result(error: BaseException) -> dict[str, Any]:
    return {
        "success": False,
        "error": type(error).__name__,
        "message": str(error),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_step(
    step: Callable[[], Awaitable[Any]], logger, event: str
) -> dict[str, Any]:
    """Run one pipeline step and wrap its summary.

    Persistence або інший неочікуваний збій не пропагується: scheduler
    отримує ``success: False`` і наступний tick просто повторить крок.
    """
    try:
        summary = await step()
    except Exception as e:
        logger.exception(f"{event}.failed", extra={"error": str(e)})
        return failure_result(e)
    return success_result(summary.to_dict())
