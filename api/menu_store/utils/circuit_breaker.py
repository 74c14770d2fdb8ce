from __future__ import annotations
import time
from typing import Awaitable, Callable, Optional, TypeVar
from enum import Enum
from menu_store.errors import CircuitOpenError
from menu_store.obs.logging_setup import get_logger

logger = get_logger(__name__)
T = TypeVar("T")

class CircuitState(Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

class CircuitBreaker:
    """Fail fast on a dependency after repeated failures; never retries."""

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        expected_exception: type = Exception,
        clock: Callable[[], float] = time.monotonic
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.expected_exception = expected_exception
        self._clock = clock

        self.failure_count = 0
        self.last_failure_time: Optional[float] = None
        self.state = CircuitState.CLOSED

    async def call(self, func: Callable[..., Awaitable[T]], *args, **kwargs) -> T:
        if self.state == CircuitState.OPEN:
            if self._should_attempt_reset():
                self.state = CircuitState.HALF_OPEN
                logger.info("Circuit breaker half-open", breaker=self.name)
            else:
                raise CircuitOpenError(f"Circuit breaker '{self.name}' is open")

        try:
            result = await func(*args, **kwargs)
        except self.expected_exception:
            self._on_failure()
            raise

        self._on_success()
        return result

    def _should_attempt_reset(self) -> bool:
        return (
            self.last_failure_time is not None and
            self._clock() - self.last_failure_time >= self.recovery_timeout
        )

    def _on_success(self):
        self.failure_count = 0
        if self.state == CircuitState.HALF_OPEN:
            self.state = CircuitState.CLOSED
            logger.info("Circuit breaker closed", breaker=self.name)

    def _on_failure(self):
        self.failure_count += 1
        self.last_failure_time = self._clock()

        if self.state == CircuitState.HALF_OPEN or self.failure_count >= self.failure_threshold:
            self.state = CircuitState.OPEN
            logger.error(
                "Circuit breaker opened",
                breaker=self.name,
                failure_count=self.failure_count
            )
