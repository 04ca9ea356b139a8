# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from websearch_core.config import ProviderName, settings
from websearch_core.search.engines.bing import BingSearch
from websearch_core.search.engines.duckduckgo import DuckDuckGoSearch
from websearch_core.search.engines.duckduckgo_api import DuckDuckGoInstantAnswerSearch
from websearch_core.search.engines.engine import SearchEngine
from websearch_core.search.engines.google import GoogleSearch
from websearch_core.search.engines.searx import SearxSearch
from websearch_core.search.engines.startpage import StartPageSearch
from websearch_core.search.engines.wikipedia import WikipediaSearch
from websearch_core.search.engines.yandex import YandexSearch
from websearch_core.search.filter import ResultFilter

ENGINES: dict[str, type[SearchEngine]] = {
    "google": GoogleSearch,
    "bing": BingSearch,
    "duckduckgo": DuckDuckGoSearch,
    "duckduckgo_api": DuckDuckGoInstantAnswerSearch,
    "startpage": StartPageSearch,
    "yandex": YandexSearch,
    "searx": SearxSearch,
    "wikipedia": WikipediaSearch,
}


class SearchEngineFactory:
    """Factory for SearchEngine instances."""

    @staticmethod
    def create(provider: ProviderName | str, result_filter: ResultFilter | None = None) -> SearchEngine:
        engine_cls = ENGINES.get(provider)
        if engine_cls is None:
            raise ValueError(f"Unsupported search provider {provider}")
        return engine_cls(result_filter=result_filter)

    @staticmethod
    def create_all(
        providers: list[ProviderName] | None = None, result_filter: ResultFilter | None = None
    ) -> list[SearchEngine]:
        return [SearchEngineFactory.create(p, result_filter) for p in (providers or settings.SEARCH_PROVIDERS)]
