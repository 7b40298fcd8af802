"""Exponential backoff retry для read-викликів брокера.

Тільки idempotent читання (positions, balances, quotes, symbol search).
Order placement сюди ніколи не потрапляє: повтор міг би подвоїти ордер.
"""

import asyncio
import logging
from functools import wraps
from typing import Any, Awaitable, Callable, Type, TypeVar

from copytrade.domain.brokerage.exceptions import (
    BrokerageConnectionError,
    BrokerageTimeoutError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: tuple[Type[Exception], ...] = (
    BrokerageConnectionError,
    BrokerageTimeoutError,
    RateLimitError,
)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    retryable_exceptions: tuple[Type[Exception], ...] = TRANSIENT_ERRORS,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator для retry з exponential backoff.

    Args:
        max_retries: Кількість повторів після першої спроби.
        base_delay: Базова затримка в секундах.
        max_delay: Максимальна затримка в секундах.
        exponential_base: База для exponential backoff.
        retryable_exceptions: Exceptions, після яких є сенс повторити.

    Example:
        >>> fetch = retry_with_backoff(max_retries=2, base_delay=0.5)(adapter._get)
        >>> # fail → wait 0.5s → fail → wait 1s → fail → raise
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError("retry_with_backoff supports async functions only")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(max_retries + 1):
                try:
                    result = await func(*args, **kwargs)
                except retryable_exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            "retry.exhausted",
                            extra={
                                "function": func.__name__,
                                "total_attempts": max_retries + 1,
                                "error": str(e),
                            },
                        )
                        raise

                    delay = min(base_delay * (exponential_base**attempt), max_delay)
                    logger.warning(
                        "retry.attempt",
                        extra={
                            "function": func.__name__,
                            "attempt": attempt + 1,
                            "max_retries": max_retries,
                            "delay_seconds": delay,
                            "error": str(e),
                        },
                    )
                    await asyncio.sleep(delay)
                    continue

                if attempt > 0:
                    logger.info(
                        "retry.success",
                        extra={"function": func.__name__, "attempt": attempt + 1},
                    )
                return result

            raise RuntimeError("Retry loop exited without result")

        return wrapper

    return decorator
