# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar
from urllib.parse import parse_qs, urljoin, urlsplit

from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, ConfigDict, ValidationError

from websearch_core.logging import get_logger
from websearch_core.search.filter import ResultFilter
from websearch_core.search.http import FetchResponse, HeaderProfile, HttpFetcher
from websearch_core.search.types import SearchQuery, SearchResult, SearchType
from websearch_core.utils import clean_text

logger = get_logger(__name__)


class EngineRequest(BaseModel):
    url: str
    headers: dict[str, str] = {}
    referer: str | None = None


class SelectorSet(BaseModel):
    """
    One known layout of a result page. Each field lists CSS selectors tried in order,
    the first element found wins.
    """

    model_config = ConfigDict(frozen=True)

    container: str
    title: tuple[str, ...]
    link: tuple[str, ...] = ()
    snippet: tuple[str, ...] = ()


class SearchEngine(ABC):
    name: ClassVar[str]
    supported_types: ClassVar[frozenset[SearchType]] = frozenset({SearchType.GENERAL})

    def __init__(self, result_filter: ResultFilter | None = None) -> None:
        self.result_filter = result_filter or ResultFilter()

    def supports(self, query: SearchQuery) -> bool:
        return query.type in self.supported_types

    @abstractmethod
    def build_request(self, query: SearchQuery, language: str) -> EngineRequest:
        """Build the provider request for `query`"""
        pass

    @abstractmethod
    def parse(self, body: str, query: SearchQuery) -> list[SearchResult]:
        """Translate a raw response body into accepted results, never raises"""
        pass

    async def search(
        self,
        query: SearchQuery,
        fetcher: HttpFetcher,
        language: str,
        profile: HeaderProfile = HeaderProfile.BROWSER,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Do search"""
        request = self.build_request(query, language)
        response: FetchResponse = await fetcher.fetch(
            request.url,
            extra_headers=request.headers,
            timeout=timeout,
            profile=profile,
            referer=request.referer,
        )
        return self.parse(response.text, query)

    def make_result(
        self, title: str | None, url: str | None, snippet: str | None, query: SearchQuery, **metadata: Any
    ) -> SearchResult | None:
        title = clean_text(title)
        snippet = clean_text(snippet)
        if not url or not self.result_filter.accept(title, url, snippet, query.query):
            return None

        try:
            return SearchResult(title=title, url=url, snippet=snippet, metadata={"source": self.name, **metadata})
        except ValidationError as e:
            logger.debug(f"[{self.name}] Dropped candidate {url}: {e.error_count()} validation error(s)")
            return None


class HtmlSearchEngine(SearchEngine):
    """Result page scraper driven by an ordered list of selector sets."""

    base_url: ClassVar[str]
    selector_sets: ClassVar[tuple[SelectorSet, ...]]

    def selector_sets_for(self, query: SearchQuery) -> tuple[SelectorSet, ...]:
        return self.selector_sets

    def resolve_url(self, href: str) -> str | None:
        """Turn a raw `href` from the result page into an absolute target url"""
        href = href.strip()
        if not href:
            return None
        if href.startswith("//"):
            return f"https:{href}"
        if href.startswith("/"):
            return urljoin(self.base_url, href)
        return href

    def parse(self, body: str, query: SearchQuery) -> list[SearchResult]:
        try:
            soup = BeautifulSoup(body, "lxml")
        except Exception as e:
            logger.warning(f"[{self.name}] Unparseable result page: {e!r}")
            return []

        for selectors in self.selector_sets_for(query):
            results = self._parse_with(soup, selectors, query)
            if results:
                logger.debug(f"[{self.name}] {len(results)} results using '{selectors.container}'")
                return results

        logger.info(f"[{self.name}] No selector set matched the result page")
        return []

    def _parse_with(self, soup: BeautifulSoup, selectors: SelectorSet, query: SearchQuery) -> list[SearchResult]:
        results: dict[str, SearchResult] = {}
        for element in soup.select(selectors.container):
            try:
                result = self._parse_element(element, selectors, query)
            except Exception as e:
                logger.debug(f"[{self.name}] Skipping malformed element: {e!r}")
                continue

            if result is not None and result.normalized_url not in results:
                results[result.normalized_url] = result
        return list(results.values())

    def _parse_element(self, element: Tag, selectors: SelectorSet, query: SearchQuery) -> SearchResult | None:
        title_el = select_first(element, selectors.title)
        if title_el is None:
            return None

        link_el = select_first(element, selectors.link) if selectors.link else None
        if link_el is None:
            link_el = title_el if title_el.name == "a" else title_el.find_parent("a")
        if link_el is None or not link_el.get("href"):
            return None

        url = self.resolve_url(str(link_el["href"]))
        snippet_el = select_first(element, selectors.snippet)
        snippet = snippet_el.get_text(" ") if snippet_el is not None else ""
        return self.make_result(title_el.get_text(" "), url, snippet, query)


class JsonSearchEngine(SearchEngine):
    @abstractmethod
    def parse_json(self, data: Any, query: SearchQuery) -> list[SearchResult]:
        pass

    def parse(self, body: str, query: SearchQuery) -> list[SearchResult]:
        try:
            data = json.loads(body)
        except ValueError as e:
            logger.warning(f"[{self.name}] Invalid JSON response: {e!s}")
            return []

        try:
            return self.parse_json(data, query)
        except (KeyError, TypeError, AttributeError) as e:
            logger.warning(f"[{self.name}] Unexpected JSON shape: {e!r}")
            return []


def select_first(element: Tag, selectors: tuple[str, ...]) -> Tag | None:
    for selector in selectors:
        found = element.select_one(selector)
        if found is not None:
            return found
    return None


def query_param(url: str, *names: str) -> str | None:
    """First non-empty value of any of `names` in the query string of `url`"""
    params = parse_qs(urlsplit(url).query)
    for name in names:
        values = params.get(name)
        if values and values[0]:
            return values[0]
    return None
