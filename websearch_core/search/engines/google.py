# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from urllib.parse import urlencode

from websearch_core.search.engines.engine import EngineRequest, HtmlSearchEngine, SelectorSet, query_param
from websearch_core.search.types import SearchQuery, SearchType

TITLES = ("h3", ".LC20lb", ".DKV0Md")
LINKS = ('a[href^="http"]', 'a[href^="/url"]')
SNIPPETS = (".VwiC3b", ".s3v9rd", ".hgKElc", "[data-sncf]", ".IsZvec", ".lEBKkf")


class GoogleSearch(HtmlSearchEngine):
    name = "google"
    base_url = "https://www.google.com/"
    supported_types = frozenset({SearchType.GENERAL, SearchType.NEWS})

    # Google rotates class names regularly, newest layouts first
    selector_sets = (
        SelectorSet(container="div.g", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div.tF2Cxc", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div.MjjYud", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div.kvH3mc", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div.yuRUbf", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div[data-ved]", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container=".rc", title=TITLES, link=LINKS, snippet=SNIPPETS),
        SelectorSet(container="div.SoaBEf", title=("div[role=heading]", ".n0jPhd"), link=("a[href]",)),
    )

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {"q": query.formatted_query, "num": max(10, query.max_results), "hl": language}
        if query.type == SearchType.NEWS:
            params["tbm"] = "nws"
        return EngineRequest(url=f"https://www.google.com/search?{urlencode(params)}", referer=self.base_url)

    def resolve_url(self, href: str) -> str | None:
        # Tracking redirect, the target is in the q (or url) parameter
        if href.startswith("/url?") or href.startswith("https://www.google.com/url?"):
            return query_param(href, "q", "url")
        if href.startswith("/"):
            return None
        return super().resolve_url(href)
