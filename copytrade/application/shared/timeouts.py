"""Bounded brokerage calls.

Кожен виклик брокера з use case обгортається тут, щоб один завислий
рахунок не тримав всю invocation до hard time limit scheduler'а.
"""

import asyncio
from typing import Awaitable, TypeVar

from copytrade.domain.brokerage.exceptions import BrokerageTimeoutError

T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout_seconds: float, operation: str) -> T:
    """Await ``awaitable`` or raise BrokerageTimeoutError after ``timeout_seconds``.

    Example:
        >>> positions = await with_timeout(
        ...     brokerage.get_account_positions(creds, account_id), 15, "get_positions"
        ... )
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except asyncio.TimeoutError as e:
        raise BrokerageTimeoutError(
            f"{operation} timed out after {timeout_seconds}s",
            operation=operation,
            timeout_seconds=timeout_seconds,
        ) from e
