# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from urllib.parse import urlencode

from websearch_core.search.engines.engine import EngineRequest, HtmlSearchEngine, SelectorSet
from websearch_core.search.types import SearchQuery, SearchType

MARKETS = {"pt": "pt-BR", "en": "en-US"}


class BingSearch(HtmlSearchEngine):
    name = "bing"
    base_url = "https://www.bing.com/"
    supported_types = frozenset({SearchType.GENERAL, SearchType.NEWS})

    selector_sets = (
        SelectorSet(
            container=".b_algo",
            title=("h2 a", ".b_title a"),
            snippet=(".b_caption p", ".b_snippet", ".b_descript", ".b_lineclamp2"),
        ),
        SelectorSet(
            container=".b_algo_group",
            title=("h2 a", ".b_title a"),
            snippet=(".b_caption p", ".b_snippet", ".b_descript"),
        ),
    )

    news_selector_sets = (
        SelectorSet(container="div.news-card", title=("a.title",), snippet=("div.snippet",)),
        SelectorSet(container="div.newsitem", title=("a.title",), snippet=(".snippet",)),
    )

    def selector_sets_for(self, query: SearchQuery) -> tuple[SelectorSet, ...]:
        if query.type == SearchType.NEWS:
            return self.news_selector_sets
        return self.selector_sets

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        path = "news/search" if query.type == SearchType.NEWS else "search"
        params = {
            "q": query.formatted_query,
            "count": max(10, query.max_results),
            "mkt": MARKETS.get(language, "en-US"),
        }
        return EngineRequest(url=f"https://www.bing.com/{path}?{urlencode(params)}", referer=self.base_url)
