# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from types import TracebackType
from typing import Self

from websearch_core.config import ProviderName, settings
from websearch_core.emitter import EventEmitter
from websearch_core.logging import get_logger_with_prefix, new_session_id
from websearch_core.search.engines.factory import SearchEngineFactory
from websearch_core.search.errors import SearchExhaustedError
from websearch_core.search.http import HttpFetcher
from websearch_core.search.intelligent import MultiRoundConfig, MultiRoundSearch
from websearch_core.search.manager import SearchStrategyManager, StrategyManagerConfig
from websearch_core.search.scraping.content import PageContentFetcher
from websearch_core.search.strategy import EngineSearchStrategy, SearchStrategy
from websearch_core.search.types import SearchQuery, SearchResult, SearchType
from websearch_core.utils import log_settings


class WebSearchTool(EventEmitter):
    """
    Entry point for the chat layer. Plain searches go through the strategy manager,
    deep searches through the multi-round pipeline, both share circuit breakers and cache.
    """

    def __init__(
        self,
        fetcher: HttpFetcher | None = None,
        strategies: list[SearchStrategy] | None = None,
        providers: list[ProviderName] | None = None,
        manager_config: StrategyManagerConfig | None = None,
        multi_round_config: MultiRoundConfig | None = None,
        session_id: str | None = None,
    ) -> None:
        super().__init__()
        self.session_id = session_id or new_session_id()
        self.logger = get_logger_with_prefix(__name__, "WebSearchTool", self.session_id)
        self.fetcher = fetcher or HttpFetcher()

        if strategies is None:
            strategies = [
                EngineSearchStrategy(engine, self.fetcher) for engine in SearchEngineFactory.create_all(providers)
            ]

        self.manager = SearchStrategyManager(strategies, config=manager_config, session_id=self.session_id)
        self.content = PageContentFetcher(self.fetcher)
        self.multi_round = MultiRoundSearch(
            self.manager, content_fetcher=self.content, config=multi_round_config, session_id=self.session_id
        )
        self.forward_events_from(self.manager)
        self.forward_events_from(self.multi_round)

    @staticmethod
    def _as_query(
        query: SearchQuery | str, max_results: int | None = None, type: SearchType = SearchType.GENERAL
    ) -> SearchQuery:
        if isinstance(query, SearchQuery):
            return query
        return SearchQuery(query=query, type=type, max_results=max_results or settings.SEARCH_MAX_RESULTS)

    async def search(
        self, query: SearchQuery | str, max_results: int | None = None, type: SearchType = SearchType.GENERAL
    ) -> list[SearchResult]:
        """
        Results of the best performing provider for `query`.

        Raises:
          SearchExhaustedError: every eligible provider failed, carries the last cause.
        """
        search_query = self._as_query(query, max_results, type)
        self.logger.info(f'Searching => "{search_query.query}"')
        outcome = await self.manager.search(search_query)
        return outcome.results

    async def deep_search(
        self, query: SearchQuery | str, max_results: int | None = None, type: SearchType = SearchType.GENERAL
    ) -> list[SearchResult]:
        search_query = self._as_query(query, max_results, type)
        self.logger.info(f'Deep searching => "{search_query.query}"')
        return await self.multi_round.search(search_query)

    async def search_or_empty(
        self,
        query: SearchQuery | str,
        max_results: int | None = None,
        type: SearchType = SearchType.GENERAL,
        deep: bool = False,
    ) -> list[SearchResult]:
        """Like `search`, but an exhausted search yields no web context instead of an error"""
        try:
            if deep:
                return await self.deep_search(query, max_results, type)
            return await self.search(query, max_results, type)
        except SearchExhaustedError as e:
            self.logger.warning(f"Continuing without web context: {e!s}")
            return []

    async def fetch_page_content(self, url: str) -> str:
        return await self.content.fetch_page_content(url)

    async def enrich_with_content(self, results: list[SearchResult]) -> list[SearchResult]:
        return await self.content.enrich_with_content(results)

    async def start(self) -> None:
        log_settings(settings, name="Web search")
        await self.manager.start()

    async def stop(self) -> None:
        await self.manager.stop()

    async def aclose(self) -> None:
        await self.stop()
        await self.fetcher.aclose()

    async def __aenter__(self) -> Self:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
