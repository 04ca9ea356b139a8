# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from urllib.parse import urlencode

from websearch_core.search.engines.engine import EngineRequest, HtmlSearchEngine, SelectorSet
from websearch_core.search.types import SearchQuery

LANGUAGES = {"pt": "portuguese", "en": "english"}


class StartPageSearch(HtmlSearchEngine):
    name = "startpage"
    base_url = "https://www.startpage.com/"

    selector_sets = (
        SelectorSet(
            container=".w-gl__result",
            title=("h3 a", ".w-gl__result-title", "a.result-title"),
            link=("a.w-gl__result-title", "a.result-link", "a[href^='http']"),
            snippet=(".w-gl__description", "p.description"),
        ),
        SelectorSet(
            container=".result",
            title=("a.result-title", "h2 a"),
            snippet=("p.description",),
        ),
    )

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {"query": query.formatted_query, "cat": "web", "language": LANGUAGES.get(language, "english")}
        return EngineRequest(url=f"https://www.startpage.com/sp/search?{urlencode(params)}", referer=self.base_url)
