"""Circuit Breaker для brokerage API.

Коли брокер down:
- Без circuit breaker: кожен follower чекає timeout
- З circuit breaker: після N failures → OPEN → fast fail для решти fan-out

State Machine:
CLOSED (normal) → OPEN (failing) → HALF_OPEN (testing) → CLOSED/OPEN
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Type, TypeVar

from copytrade.domain.brokerage.exceptions import CircuitBreakerOpenError

from .retry import TRANSIENT_ERRORS

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(Enum):
    CLOSED = "CLOSED"  # Нормальний стан - пропускаємо requests
    OPEN = "OPEN"  # Failure стан - reject requests (fast fail)
    HALF_OPEN = "HALF_OPEN"  # Testing стан - пробний request


class CircuitBreaker:
    """Circuit Breaker implementation.

    Рахує тільки ``failure_exceptions`` (transient/network). Бізнесові
    відмови брокера (symbol not found, impact rejected) circuit не відкривають.

    Example:
        >>> circuit = CircuitBreaker(name="snaptrade", failure_threshold=5)
        >>> positions = await circuit.call(adapter._get, path, creds)
    """

    def __init__(
        self,
        name: str = "brokerage",
        failure_threshold: int = 5,
        timeout_seconds: int = 60,
        success_threshold: int = 1,
        failure_exceptions: tuple[Type[Exception], ...] = TRANSIENT_ERRORS,
    ) -> None:
        """Initialize circuit breaker.

        Args:
            name: Ім'я для логів.
            failure_threshold: Кількість consecutive failures для OPEN.
            timeout_seconds: Скільки секунд тримати circuit OPEN.
            success_threshold: Кількість successes в HALF_OPEN для CLOSED.
            failure_exceptions: Exceptions, що рахуються як failure.
        """
        self.name = name
        self.failure_threshold = failure_threshold
        self.timeout_seconds = timeout_seconds
        self.success_threshold = success_threshold
        self.failure_exceptions = failure_exceptions

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: datetime | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    async def call(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Execute function через circuit breaker.

        Raises:
            CircuitBreakerOpenError: Якщо circuit OPEN.
            Exception: Будь-яка exception від func.
        """
        async with self._lock:
            if self._state == CircuitState.OPEN:
                if not self._should_attempt_reset():
                    logger.warning(
                        "circuit_breaker.rejected",
                        extra={"circuit": self.name, "failure_count": self._failure_count},
                    )
                    raise CircuitBreakerOpenError(
                        f"Circuit breaker OPEN for {self.name}, retry later",
                        circuit=self.name,
                    )
                logger.info("circuit_breaker.half_open", extra={"circuit": self.name})
                self._state = CircuitState.HALF_OPEN
                self._success_count = 0

        try:
            result = await func(*args, **kwargs)
        except self.failure_exceptions:
            async with self._lock:
                self._on_failure()
            raise

        async with self._lock:
            self._on_success()
        return result

    def _on_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.success_threshold:
                logger.info(
                    "circuit_breaker.closed",
                    extra={"circuit": self.name, "previous_failures": self._failure_count},
                )
                self._state = CircuitState.CLOSED
                self._failure_count = 0
                self._success_count = 0
        elif self._state == CircuitState.CLOSED:
            self._failure_count = 0

    def _on_failure(self) -> None:
        self._failure_count += 1
        self._last_failure_time = datetime.now(timezone.utc)

        if self._state == CircuitState.HALF_OPEN:
            logger.warning(
                "circuit_breaker.reopened",
                extra={"circuit": self.name, "failure_count": self._failure_count},
            )
            self._state = CircuitState.OPEN
        elif self._state == CircuitState.CLOSED and self._failure_count >= self.failure_threshold:
            logger.error(
                "circuit_breaker.opened",
                extra={
                    "circuit": self.name,
                    "failure_count": self._failure_count,
                    "threshold": self.failure_threshold,
                },
            )
            self._state = CircuitState.OPEN

    def _should_attempt_reset(self) -> bool:
        if self._last_failure_time is None:
            return True
        elapsed = datetime.now(timezone.utc) - self._last_failure_time
        return elapsed >= timedelta(seconds=self.timeout_seconds)

    def reset(self) -> None:
        """Manually reset circuit breaker (for testing/admin)."""
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time = None
        logger.info("circuit_breaker.manual_reset", extra={"circuit": self.name})
