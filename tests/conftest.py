# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
from collections.abc import Callable

import httpx
import pytest

from websearch_core.search.http import DomainRateLimiter, HttpFetcher
from websearch_core.search.strategy import SearchStrategy
from websearch_core.search.types import SearchQuery, SearchResult


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStrategy(SearchStrategy):
    """Strategy returning canned results, raising, or hanging, and counting its calls"""

    def __init__(
        self,
        name: str,
        results: list[SearchResult] | None = None,
        error: Exception | None = None,
        delay: float = 0.0,
        priority: int = 5,
        timeout: float = 1.0,
    ) -> None:
        super().__init__(name=name, priority=priority, timeout=timeout)
        self.results = results or []
        self.error = error
        self.delay = delay
        self.calls: list[SearchQuery] = []

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        self.calls.append(query)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.results)


def make_result(
    url: str, title: str = "Flutter development guide", snippet: str = "", source: str = "fake"
) -> SearchResult:
    return SearchResult(title=title, url=url, snippet=snippet, metadata={"source": source})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def strategy_factory() -> type[FakeStrategy]:
    return FakeStrategy


@pytest.fixture
def result_factory() -> Callable[..., SearchResult]:
    return make_result


@pytest.fixture
def mock_fetcher() -> Callable[[Callable[[httpx.Request], httpx.Response]], HttpFetcher]:
    """Build an HttpFetcher whose requests are answered by `handler` instead of the network"""

    def _build(handler: Callable[[httpx.Request], httpx.Response]) -> HttpFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return HttpFetcher(client=client, rate_limiter=DomainRateLimiter(min_delay=0, jitter=0))

    return _build
