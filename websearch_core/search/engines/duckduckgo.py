# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from urllib.parse import urlencode, urljoin

from websearch_core.search.engines.engine import EngineRequest, HtmlSearchEngine, SelectorSet, query_param
from websearch_core.search.types import SearchQuery

REGIONS = {"pt": "br-pt", "en": "us-en"}


class DuckDuckGoSearch(HtmlSearchEngine):
    """DuckDuckGo through its javascript free html endpoint"""

    name = "duckduckgo"
    base_url = "https://html.duckduckgo.com/"

    selector_sets = (
        SelectorSet(container=".result", title=(".result__title a", ".result__a"), snippet=(".result__snippet",)),
        SelectorSet(container=".web-result", title=(".result__title a", ".result__a"), snippet=(".result__snippet",)),
        SelectorSet(container=".result--web", title=(".result__a",), snippet=(".result__snippet", ".result__body")),
    )

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {"q": query.formatted_query, "kl": REGIONS.get(language, "wt-wt")}
        return EngineRequest(url=f"https://html.duckduckgo.com/html/?{urlencode(params)}", referer=self.base_url)

    def resolve_url(self, href: str) -> str | None:
        # Result links go through /l/?uddg=<target>
        if "uddg=" in href:
            return query_param(urljoin("https://duckduckgo.com/", href), "uddg")
        return super().resolve_url(href)
