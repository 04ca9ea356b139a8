# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.errors import CircuitOpenError
from websearch_core.search.types import Clock

logger = get_logger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreakerConfig(BaseModel):
    failure_threshold: int = Field(default_factory=lambda: settings.CIRCUIT_FAILURE_THRESHOLD, ge=1)
    cooldown: float = Field(default_factory=lambda: settings.CIRCUIT_COOLDOWN, ge=0)
    success_threshold: int = Field(default_factory=lambda: settings.CIRCUIT_SUCCESS_THRESHOLD, ge=1)


class CircuitBreaker:
    """
    Per provider failure isolation.

    closed -> open after `failure_threshold` consecutive failures, open -> half_open once
    `cooldown` seconds have passed since the last failure, half_open -> closed after
    `success_threshold` consecutive successes, half_open -> open on any failure.
    """

    def __init__(self, name: str, config: CircuitBreakerConfig | None = None, clock: Clock = time.monotonic) -> None:
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time: float | None = None
        self._last_transition_time = clock()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def success_count(self) -> int:
        return self._success_count

    @property
    def last_transition_time(self) -> float:
        return self._last_transition_time

    def _cooldown_remaining(self) -> float:
        since = self._last_failure_time if self._last_failure_time is not None else self._last_transition_time
        return max(0.0, since + self.config.cooldown - self._clock())

    def allows_request(self) -> bool:
        """Whether `execute` would invoke the operation right now, without changing state"""
        return self._state != CircuitState.OPEN or self._cooldown_remaining() <= 0

    def idle_time(self) -> float:
        """Seconds since the last failure, or since the last transition when there was none"""
        since = self._last_failure_time if self._last_failure_time is not None else self._last_transition_time
        return self._clock() - since

    def _transition(self, state: CircuitState) -> None:
        if state == self._state:
            return
        logger.warning(f"Circuit {self.name}: {self._state.value} -> {state.value}")
        self._state = state
        self._last_transition_time = self._clock()

    async def _before_call(self) -> None:
        async with self._lock:
            if self._state != CircuitState.OPEN:
                return

            remaining = self._cooldown_remaining()
            if remaining > 0:
                raise CircuitOpenError(self.name, remaining)

            self._transition(CircuitState.HALF_OPEN)
            self._success_count = 0

    async def record_success(self) -> None:
        async with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.config.success_threshold:
                    self._transition(CircuitState.CLOSED)
                    self._success_count = 0

    async def record_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            self._success_count = 0
            self._last_failure_time = self._clock()

            if self._state == CircuitState.HALF_OPEN:
                self._transition(CircuitState.OPEN)
            elif self._state == CircuitState.CLOSED and self._failure_count >= self.config.failure_threshold:
                self._transition(CircuitState.OPEN)

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Run `operation` through the breaker.

        Raises CircuitOpenError without calling `operation` while the circuit is open,
        otherwise re-raises whatever the operation raised after counting it as a failure.
        """
        await self._before_call()

        try:
            result = await operation()
        except Exception:
            await self.record_failure()
            raise

        await self.record_success()
        return result

    def reset(self) -> None:
        logger.info(f"Circuit {self.name} reset")
        self._transition(CircuitState.CLOSED)
        self._failure_count = 0
        self._success_count = 0
        self._last_failure_time = None

    def get_status(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "state": self._state.value,
            "failure_count": self._failure_count,
            "success_count": self._success_count,
            "cooldown_remaining": self._cooldown_remaining() if self._state == CircuitState.OPEN else 0.0,
            "failure_threshold": self.config.failure_threshold,
            "success_threshold": self.config.success_threshold,
        }
