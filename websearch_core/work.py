# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from aiolimiter import AsyncLimiter

from websearch_core.config import settings
from websearch_core.logging import get_logger

logger = get_logger(__name__)


class WorkerPool:
    """
    Bounds outbound work with a semaphore (concurrency) and a leaky bucket (throughput).
    Instances are created by their owner so that the asyncio primitives bind to the running loop.
    """

    def __init__(
        self,
        name: str,
        max_concurrent_tasks: int = 8,
        rate_limit: int = 8,
        rate_period: float = 2,
    ) -> None:
        self.name = name
        self.semaphore = asyncio.Semaphore(max_concurrent_tasks)
        self.rate_limiter = AsyncLimiter(rate_limit, rate_period)
        self._in_flight = 0
        self._counter_lock = asyncio.Lock()

    @classmethod
    def for_requests(cls, name: str = "requests") -> "WorkerPool":
        return cls(
            name=name,
            max_concurrent_tasks=settings.MAX_CONCURRENT_REQUESTS,
            rate_limit=settings.RATE_LIMIT_REQUESTS,
            rate_period=settings.RATE_PERIOD_REQUESTS,
        )

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @asynccontextmanager
    async def throttle(self) -> AsyncIterator[None]:
        async with self.semaphore:
            async with self.rate_limiter:
                async with self._counter_lock:
                    self._in_flight += 1

                logger.debug(f"[{self.name}] Acquired slot, in flight={self._in_flight}")

                try:
                    yield

                finally:
                    async with self._counter_lock:
                        self._in_flight -= 1

                    logger.debug(f"[{self.name}] Released slot, in flight={self._in_flight}")
