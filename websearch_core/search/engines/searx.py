# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from typing import Any
from urllib.parse import urlencode

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.engines.engine import EngineRequest, JsonSearchEngine
from websearch_core.search.types import SearchQuery, SearchResult, SearchType

logger = get_logger(__name__)


class SearxSearch(JsonSearchEngine):
    name = "searx"
    supported_types = frozenset({SearchType.GENERAL, SearchType.NEWS})

    def __init__(self, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or settings.SEARX_BASE_URL).rstrip("/")

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {
            "q": query.formatted_query,
            "categories": "news" if query.type == SearchType.NEWS else "general",
            "language": language,
            "format": "json",
        }
        return EngineRequest(
            url=f"{self.base_url}/?{urlencode(params)}",
            headers={"Accept": "application/json"},
        )

    def parse_json(self, data: Any, query: SearchQuery) -> list[SearchResult]:
        results: list[SearchResult] = []
        for item in data.get("results", []):
            try:
                result = self.make_result(item.get("title"), item.get("url"), item.get("content"), query)
            except Exception as e:
                logger.debug(f"[{self.name}] Skipping malformed item: {e!r}")
                continue
            if result is not None:
                results.append(result)
        return results
