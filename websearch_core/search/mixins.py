# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from typing import Any

from websearch_core.search.types import QualifiedSearchResult, SearchResult
from websearch_core.utils import normalize_url


class SearchResultsMixin:
    """Collects results for one search session, keeping the first result seen per normalized url."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._search_results: dict[str, SearchResult] = {}
        super().__init__(*args, **kwargs)

    def contains_search_result(self, url: str) -> bool:
        return normalize_url(url) in self._search_results

    def add_search_results(self, search_results: list[SearchResult]) -> list[SearchResult]:
        """Add `search_results`, returning the ones that were not seen before"""
        return [s for s in search_results if self.add_search_result(s)]

    def add_search_result(self, search_result: SearchResult) -> bool:
        key = search_result.normalized_url
        if key in self._search_results:
            return False
        self._search_results[key] = search_result
        return True

    def clear_search_results(self) -> None:
        self._search_results.clear()

    @property
    def search_results(self) -> list[SearchResult]:
        return list(self._search_results.values())


class QualifiedSearchResultsMixin:
    """Keeps the best scoring candidate per normalized url across rounds."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._qualified_results: dict[str, QualifiedSearchResult] = {}
        super().__init__(*args, **kwargs)

    def add_qualified_result(self, qualified: QualifiedSearchResult) -> bool:
        key = qualified.normalized_url
        current = self._qualified_results.get(key)
        if current is not None and current.total_score >= qualified.total_score:
            return False
        self._qualified_results[key] = qualified
        return True

    def clear_qualified_results(self) -> None:
        self._qualified_results.clear()

    @property
    def qualified_results(self) -> list[QualifiedSearchResult]:
        return sorted(self._qualified_results.values(), key=lambda q: q.total_score, reverse=True)


def dedupe_results(results: list[SearchResult]) -> list[SearchResult]:
    seen: set[str] = set()
    unique: list[SearchResult] = []
    for r in results:
        if r.normalized_url not in seen:
            seen.add(r.normalized_url)
            unique.append(r)
    return unique
