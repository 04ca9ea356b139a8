# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from typing import Any
from urllib.parse import urlencode

from websearch_core.logging import get_logger
from websearch_core.search.engines.engine import EngineRequest, JsonSearchEngine
from websearch_core.search.types import SearchQuery, SearchResult

logger = get_logger(__name__)


class DuckDuckGoInstantAnswerSearch(JsonSearchEngine):
    """
    DuckDuckGo Instant Answer API. The abstract (or definition) comes first, followed by
    related topics, whose text reads "<title> - <description>".
    """

    name = "duckduckgo_api"

    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        params = {"q": query.formatted_query, "format": "json", "no_html": 1, "skip_disambig": 1}
        return EngineRequest(
            url=f"https://api.duckduckgo.com/?{urlencode(params)}",
            headers={"Accept": "application/json"},
        )

    def parse_json(self, data: Any, query: SearchQuery) -> list[SearchResult]:
        results: list[SearchResult] = []

        heading = data.get("Heading") or query.query
        if data.get("Abstract") and data.get("AbstractURL"):
            abstract = self.make_result(heading, data["AbstractURL"], data["Abstract"], query, kind="abstract")
            if abstract is not None:
                results.append(abstract)
        elif data.get("Definition") and data.get("DefinitionURL"):
            definition = self.make_result(heading, data["DefinitionURL"], data["Definition"], query, kind="definition")
            if definition is not None:
                results.append(definition)

        for topic in _flatten_topics(data.get("RelatedTopics", [])):
            try:
                text = topic.get("Text") or ""
                title, _, description = text.partition(" - ")
                result = self.make_result(title, topic.get("FirstURL"), description or text, query, kind="topic")
            except Exception as e:
                logger.debug(f"[{self.name}] Skipping malformed topic: {e!r}")
                continue
            if result is not None:
                results.append(result)

        return results


def _flatten_topics(topics: list[Any]) -> list[dict[str, Any]]:
    # Disambiguation groups nest their entries under "Topics"
    flat: list[dict[str, Any]] = []
    for topic in topics:
        if not isinstance(topic, dict):
            continue
        if "Topics" in topic:
            flat.extend(t for t in topic["Topics"] if isinstance(t, dict))
        else:
            flat.append(topic)
    return flat
