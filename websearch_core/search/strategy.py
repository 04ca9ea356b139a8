# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from abc import ABC, abstractmethod

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.engines.engine import SearchEngine
from websearch_core.search.errors import EmptyResultsError, FetchError, FetchTimeoutError
from websearch_core.search.http import HeaderProfile, HttpFetcher
from websearch_core.search.mixins import dedupe_results
from websearch_core.search.types import SearchQuery, SearchResult, StrategyMetrics

logger = get_logger(__name__)

# (priority, timeout in seconds) per provider, higher priority is preferred
PROVIDER_DEFAULTS: dict[str, tuple[int, float]] = {
    "google": (10, 15),
    "bing": (9, 12),
    "duckduckgo": (8, 10),
    "startpage": (8, 12),
    "searx": (7, 10),
    "wikipedia": (6, 8),
    "yandex": (6, 12),
    "duckduckgo_api": (5, 8),
}


class SearchStrategy(ABC):
    """A single provider as seen by the strategy manager."""

    def __init__(self, name: str, priority: int = 5, timeout: float | None = None, enabled: bool = True) -> None:
        self.name = name
        self.priority = priority
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.enabled = enabled
        self.metrics = StrategyMetrics()

    @property
    def is_available(self) -> bool:
        return self.enabled

    def can_handle(self, query: SearchQuery) -> bool:
        return not query.is_blank

    @abstractmethod
    async def search(self, query: SearchQuery) -> list[SearchResult]:
        """Return at least one result or raise"""
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


class EngineSearchStrategy(SearchStrategy):
    """
    Fetch and parse through one search engine. When a request fails or the page yields
    nothing, the request is repeated with the next header profile, a timeout ends the attempt.
    """

    def __init__(
        self,
        engine: SearchEngine,
        fetcher: HttpFetcher,
        priority: int | None = None,
        timeout: float | None = None,
        profiles: tuple[HeaderProfile, ...] = (HeaderProfile.BROWSER, HeaderProfile.IDENTITY, HeaderProfile.MINIMAL),
        language: str | None = None,
        enabled: bool = True,
    ) -> None:
        default_priority, default_timeout = PROVIDER_DEFAULTS.get(engine.name, (5, settings.HTTP_TIMEOUT))
        super().__init__(
            name=engine.name,
            priority=default_priority if priority is None else priority,
            timeout=timeout or default_timeout,
            enabled=enabled,
        )
        self.engine = engine
        self.fetcher = fetcher
        self.profiles = profiles
        self.language = language or settings.SEARCH_LANGUAGE

    def can_handle(self, query: SearchQuery) -> bool:
        return super().can_handle(query) and self.engine.supports(query)

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        last_error: FetchError | None = None

        for profile in self.profiles:
            try:
                results = await self.engine.search(
                    query, self.fetcher, query.language or self.language, profile=profile, timeout=self.timeout
                )
            except FetchTimeoutError:
                raise
            except FetchError as e:
                logger.info(f"[{self.name}] {profile.value} request failed: {e!s}")
                last_error = e
                continue

            if results:
                return dedupe_results(results)[: query.max_results]

            logger.info(f"[{self.name}] {profile.value} request returned no usable results")

        if last_error is not None:
            raise last_error
        raise EmptyResultsError(self.name)
