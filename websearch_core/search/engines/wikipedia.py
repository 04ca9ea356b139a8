# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from typing import Any
from urllib.parse import quote, urlencode

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.engines.engine import EngineRequest, JsonSearchEngine
from websearch_core.search.filter import ResultFilter
from websearch_core.search.types import SearchQuery, SearchResult

logger = get_logger(__name__)


class WikipediaSearch(JsonSearchEngine):
    """
    Wikipedia full text search API. Titles and snippets come back with highlight
    markup, which is stripped by the shared text cleaning.
    """

    name = "wikipedia"

    def __init__(self, language: str | None = None, result_filter: ResultFilter | None = None) -> None:
        super().__init__(result_filter=result_filter)
        self.language = language or settings.SEARCH_LANGUAGE

    def _language_for(self, query: SearchQuery) -> str:
        return query.language or self.language

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {
            "action": "query",
            "list": "search",
            "srsearch": query.query,
            "format": "json",
            "srlimit": query.max_results,
        }
        return EngineRequest(
            url=f"https://{self._language_for(query)}.wikipedia.org/w/api.php?{urlencode(params)}",
            headers={"Accept": "application/json"},
        )

    def parse_json(self, data: Any, query: SearchQuery) -> list[SearchResult]:
        language = self._language_for(query)
        results: list[SearchResult] = []
        for item in data.get("query", {}).get("search", []):
            try:
                page_id = item["pageid"]
                url = article_url(language, item["title"])
                result = self.make_result(item.get("title"), url, item.get("snippet"), query, page_id=page_id)
            except Exception as e:
                logger.debug(f"[{self.name}] Skipping malformed item: {e!r}")
                continue
            if result is not None:
                results.append(result)
        return results


def article_url(language: str, title: str) -> str:
    """Canonical /wiki/ address of an article, distinct per page once query strings are dropped"""
    return f"https://{language}.wikipedia.org/wiki/{quote(title.replace(' ', '_'), safe='()_,:!')}"
