# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from urllib.parse import urlencode

from websearch_core.search.engines.engine import EngineRequest, HtmlSearchEngine, SelectorSet
from websearch_core.search.types import SearchQuery


class YandexSearch(HtmlSearchEngine):
    name = "yandex"
    base_url = "https://yandex.com/"

    selector_sets = (
        SelectorSet(
            container=".serp-item",
            title=(".organic__title-wrapper a", ".OrganicTitle-Link", "h2 a"),
            snippet=(".organic__text", ".OrganicText", ".TextContainer"),
        ),
        SelectorSet(
            container="li.serp-item_card",
            title=("a.Link h2", "a.organic__url"),
            link=("a.organic__url", "a.Link"),
            snippet=(".Organic-ContentWrapper",),
        ),
    )

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {"text": query.formatted_query, "lang": language}
        return EngineRequest(url=f"https://yandex.com/search/?{urlencode(params)}", referer=self.base_url)
