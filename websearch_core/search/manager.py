# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, Field

from websearch_core.cache import ResultCache
from websearch_core.config import settings
from websearch_core.emitter import EventEmitter
from websearch_core.events import (
    CacheHitEvent,
    CircuitResetEvent,
    StrategyAttemptEvent,
    StrategyFailedEvent,
    StrategySucceededEvent,
)
from websearch_core.logging import get_logger_with_prefix
from websearch_core.search.circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState
from websearch_core.search.errors import CircuitOpenError, NoEligibleStrategyError, SearchExhaustedError
from websearch_core.search.strategy import SearchStrategy
from websearch_core.search.types import Clock, SearchQuery, SearchResult, StrategySearchResult

# Response time at which the speed component of a strategy score reaches zero
SPEED_CEILING_MS = 10_000.0
SUCCESS_WEIGHT = 0.7
SPEED_WEIGHT = 0.3
# Assumed success rate and speed of a strategy that has not been used yet
COLD_START_PRIOR = 0.5


class StrategyManagerConfig(BaseModel):
    max_fallback_attempts: int = Field(default_factory=lambda: settings.STRATEGY_MAX_FALLBACK_ATTEMPTS, ge=1)
    min_success_rate: float = Field(default_factory=lambda: settings.STRATEGY_MIN_SUCCESS_RATE, ge=0.0, le=1.0)
    health_check_interval: float = Field(default_factory=lambda: settings.HEALTH_CHECK_INTERVAL, gt=0)
    health_check_grace_period: float = Field(default_factory=lambda: settings.HEALTH_CHECK_GRACE_PERIOD, ge=0)
    cache_cleanup_interval: float = Field(default_factory=lambda: settings.CACHE_CLEANUP_INTERVAL, gt=0)


class SearchStrategyManager(EventEmitter):
    """
    Runs a query against the best available strategy, falling back to the next best one
    on failure. Owns one circuit breaker per strategy and the result cache.
    """

    def __init__(
        self,
        strategies: list[SearchStrategy] | None = None,
        config: StrategyManagerConfig | None = None,
        circuit_config: CircuitBreakerConfig | None = None,
        cache: ResultCache | None = None,
        clock: Clock = time.monotonic,
        session_id: str | None = None,
    ) -> None:
        super().__init__()
        self.config = config or StrategyManagerConfig()
        self.circuit_config = circuit_config or CircuitBreakerConfig()
        self.cache = cache if cache is not None else ResultCache(clock=clock)
        self._clock = clock
        self._strategies: dict[str, SearchStrategy] = {}
        self._breakers: dict[str, CircuitBreaker] = {}
        self._tasks: list[asyncio.Task] = []
        self.logger = get_logger_with_prefix(__name__, "StrategyManager", session_id)

        for strategy in strategies or []:
            self.register_strategy(strategy)

    @property
    def strategies(self) -> list[SearchStrategy]:
        return list(self._strategies.values())

    def register_strategy(self, strategy: SearchStrategy, circuit_config: CircuitBreakerConfig | None = None) -> None:
        if strategy.name in self._strategies:
            raise ValueError(f"Strategy {strategy.name} is already registered")
        self._strategies[strategy.name] = strategy
        self._breakers[strategy.name] = CircuitBreaker(
            strategy.name, config=circuit_config or self.circuit_config, clock=self._clock
        )
        self.logger.info(f"Registered strategy {strategy.name} (priority {strategy.priority})")

    def unregister_strategy(self, name: str) -> None:
        self._strategies.pop(name, None)
        self._breakers.pop(name, None)

    def get_strategy(self, name: str) -> SearchStrategy:
        return self._strategies[name]

    def get_breaker(self, name: str) -> CircuitBreaker:
        return self._breakers[name]

    def strategy_score(self, strategy: SearchStrategy) -> float:
        metrics = strategy.metrics
        if not metrics.has_history:
            success, speed = COLD_START_PRIOR, COLD_START_PRIOR
        else:
            success = metrics.success_rate
            speed = (
                max(0.0, (SPEED_CEILING_MS - metrics.average_response_time) / SPEED_CEILING_MS)
                if metrics.successful_searches
                else 0.0
            )
        return (SUCCESS_WEIGHT * success + SPEED_WEIGHT * speed) * strategy.priority / 10

    def rank_strategies(self, strategies: list[SearchStrategy]) -> list[SearchStrategy]:
        # sorted() is stable, equal scores keep registration order
        return sorted(strategies, key=self.strategy_score, reverse=True)

    def _meets_success_floor(self, strategy: SearchStrategy) -> bool:
        metrics = strategy.metrics
        return not metrics.has_history or metrics.success_rate >= self.config.min_success_rate

    def eligible_strategies(self, query: SearchQuery) -> list[SearchStrategy]:
        return [
            s
            for s in self._strategies.values()
            if s.is_available
            and s.can_handle(query)
            and self._breakers[s.name].allows_request()
            and self._meets_success_floor(s)
        ]

    async def execute_strategy(
        self, strategy: SearchStrategy, query: SearchQuery, timeout: float | None = None
    ) -> list[SearchResult]:
        """Run one strategy through its breaker and timeout, updating its metrics either way"""
        breaker = self._breakers[strategy.name]
        started = time.perf_counter()

        async def _operation() -> list[SearchResult]:
            return await asyncio.wait_for(strategy.search(query), timeout=timeout or strategy.timeout)

        try:
            results = await breaker.execute(_operation)
        except Exception:
            strategy.metrics.record_failure(at=self._clock())
            raise

        strategy.metrics.record_success((time.perf_counter() - started) * 1000, at=self._clock())
        return results

    async def search(self, query: SearchQuery) -> StrategySearchResult:
        cached = await self.cache.get(query)
        if cached is not None:
            self.logger.info(f"Cache hit for '{query.query}' ({len(cached.results)} results)")
            await self._emit(
                CacheHitEvent(query=query.query, strategy=cached.strategy_name, result_count=len(cached.results))
            )
            return StrategySearchResult(
                results=cached.results, strategy_name=cached.strategy_name or "cache", from_cache=True
            )

        eligible = self.eligible_strategies(query)
        if not eligible:
            cause = self._no_eligible_cause(query)
            raise SearchExhaustedError(query.query, 0, cause) from cause

        ranked = self.rank_strategies(eligible)[: self.config.max_fallback_attempts]
        self.logger.info(f"Searching '{query.query}' with {[s.name for s in ranked]}")

        last_error: BaseException | None = None
        for attempt, strategy in enumerate(ranked, start=1):
            await self._emit(StrategyAttemptEvent(strategy=strategy.name, query=query.query, attempt=attempt))
            started = time.perf_counter()

            try:
                results = await self.execute_strategy(strategy, query)
            except CircuitOpenError as e:
                self.logger.info(f"Skipping {strategy.name}: {e!s}")
                last_error = e
                await self._emit(
                    StrategyFailedEvent(strategy=strategy.name, query=query.query, error=str(e), circuit_open=True)
                )
                continue
            except Exception as e:
                self.logger.warning(f"Strategy {strategy.name} failed: {e!r}")
                last_error = e
                await self._emit(StrategyFailedEvent(strategy=strategy.name, query=query.query, error=repr(e)))
                continue

            elapsed_ms = (time.perf_counter() - started) * 1000
            await self.cache.put(query, results, strategy_name=strategy.name)
            await self._emit(
                StrategySucceededEvent(
                    strategy=strategy.name, query=query.query, result_count=len(results), elapsed_ms=elapsed_ms
                )
            )
            return StrategySearchResult(results=results, strategy_name=strategy.name, execution_time_ms=elapsed_ms)

        raise SearchExhaustedError(query.query, len(ranked), last_error) from last_error

    def _no_eligible_cause(self, query: SearchQuery) -> Exception:
        candidates = [s for s in self._strategies.values() if s.is_available and s.can_handle(query)]
        if not candidates:
            return NoEligibleStrategyError(f"No registered strategy can handle {query.query!r}")

        blocked = [s for s in candidates if not self._breakers[s.name].allows_request()]
        if blocked:
            retry_after = min(self._breakers[s.name].get_status()["cooldown_remaining"] for s in blocked)
            return CircuitOpenError(", ".join(s.name for s in blocked), retry_after)

        return NoEligibleStrategyError(
            f"All strategies are below the minimum success rate of {self.config.min_success_rate}"
        )

    def reset_strategy(self, name: str) -> None:
        """Close the breaker and clear the metrics of one strategy"""
        self._breakers[name].reset()
        self._strategies[name].metrics.reset(at=self._clock())

    async def health_check(self) -> list[str]:
        """
        Give providers a new chance: open circuits idle for longer than the grace period are reset,
        as are strategies stuck below the success floor without activity in that period.
        """
        grace = self.config.health_check_grace_period
        reset: list[str] = []

        for name, strategy in self._strategies.items():
            breaker = self._breakers[name]
            reason: str | None = None

            if breaker.state == CircuitState.OPEN and breaker.idle_time() >= grace:
                reason = "circuit open and idle"
            elif (
                not self._meets_success_floor(strategy)
                and strategy.metrics.last_updated is not None
                and self._clock() - strategy.metrics.last_updated >= grace
            ):
                reason = "success rate below floor and idle"

            if reason is not None:
                self.reset_strategy(name)
                reset.append(name)
                self.logger.info(f"Health check reset {name}: {reason}")
                await self._emit(CircuitResetEvent(strategy=name, reason=reason))

        return reset

    async def cleanup_cache(self) -> int:
        removed = await self.cache.cleanup()
        if removed:
            self.logger.info(f"Cache cleanup removed {removed} expired entries")
        return removed

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._every(self.config.health_check_interval, self.health_check, "health check")),
            asyncio.create_task(self._every(self.config.cache_cleanup_interval, self.cleanup_cache, "cache cleanup")),
        ]

    async def stop(self) -> None:
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    async def _every(self, interval: float, job: Callable[[], Awaitable[Any]], name: str) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await job()
            except Exception:
                self.logger.exception(f"Background {name} failed")

    def get_statistics(self) -> dict[str, Any]:
        return {
            "cache_entries": len(self.cache),
            "strategies": {
                name: {
                    "priority": strategy.priority,
                    "available": strategy.is_available,
                    "score": round(self.strategy_score(strategy), 4),
                    "metrics": strategy.metrics.model_dump(),
                    "success_rate": strategy.metrics.success_rate,
                    "circuit": self._breakers[name].get_status(),
                }
                for name, strategy in self._strategies.items()
            },
        }
