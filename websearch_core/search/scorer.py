# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import re
from urllib.parse import urlsplit

from pydantic import BaseModel

from websearch_core.search.types import QualifiedSearchResult, SearchContext, SearchResult

HIGH_TRUST_DOMAINS: tuple[str, ...] = (
    "wikipedia.org",
    "github.com",
    "stackoverflow.com",
    "medium.com",
    "docs.google.com",
    "developer.mozilla.org",
    "docs.python.org",
    "w3schools.com",
)
HIGH_TRUST_SUFFIXES: tuple[str, ...] = (".edu", ".gov", ".org")
SITE_BUILDER_DOMAINS: tuple[str, ...] = ("blogspot.com", "wordpress.com", "wix.com", "weebly.com")

_WORD_SPLIT_RE = re.compile(r"\s+")


class ScoringWeights(BaseModel):
    title: float = 0.3
    snippet: float = 0.2
    url: float = 0.1
    position: float = 0.1
    source: float = 0.1
    content: float = 0.2


class QualityScorer:
    """
    Weighted relevance estimate of a result for a query. Every factor lies in [0, 1],
    the content factor only contributes when page content has been fetched.
    """

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self.weights = weights or ScoringWeights()

    def score(
        self, result: SearchResult, context: SearchContext, source_weight: float = 1.0, position: int = 0
    ) -> QualifiedSearchResult:
        factors = {
            "title_relevance": text_relevance(result.title, context.keywords),
            "snippet_relevance": text_relevance(result.snippet, context.keywords),
            "url_quality": url_quality(result.url),
            "position_score": position_score(position),
            "source_weight": min(1.0, max(0.0, source_weight)),
        }
        total = (
            factors["title_relevance"] * self.weights.title
            + factors["snippet_relevance"] * self.weights.snippet
            + factors["url_quality"] * self.weights.url
            + factors["position_score"] * self.weights.position
            + factors["source_weight"] * self.weights.source
        )

        if result.content:
            factors["content_score"] = content_score(result.content, context.keywords)
            total += factors["content_score"] * self.weights.content

        return QualifiedSearchResult(result=result, total_score=total, factors=factors)

    def score_all(
        self, results: list[SearchResult], context: SearchContext, source_weight: float = 1.0
    ) -> list[QualifiedSearchResult]:
        return [self.score(r, context, source_weight, position) for position, r in enumerate(results)]


def text_relevance(text: str, keywords: tuple[str, ...]) -> float:
    if not text or not keywords:
        return 0.0

    lowered = text.lower()
    relevance = 0.0
    matches = 0
    for keyword in keywords:
        index = lowered.find(keyword.lower())
        if index < 0:
            continue
        matches += 1
        bonus = 0.2 if index == 0 else 0.1 if index < 20 else 0.0
        relevance += (1.0 + bonus) / len(keywords)

    relevance += 0.3 * matches / len(keywords)
    return min(1.0, max(0.0, relevance))


def url_quality(url: str) -> float:
    try:
        parts = urlsplit(url)
        host = (parts.hostname or "").lower()
    except ValueError:
        return 0.2
    if not parts.scheme or not host:
        return 0.2

    quality = 0.5
    if any(host == d or host.endswith(f".{d}") for d in HIGH_TRUST_DOMAINS) or host.endswith(HIGH_TRUST_SUFFIXES):
        quality += 0.3
    if any(host == d or host.endswith(f".{d}") for d in SITE_BUILDER_DOMAINS):
        quality -= 0.2

    segments = [s for s in parts.path.split("/") if s]
    if 2 <= len(segments) <= 5:
        quality += 0.1
    if parts.scheme == "https":
        quality += 0.1

    return min(1.0, max(0.0, quality))


def position_score(position: int) -> float:
    return max(0.0, 1.0 - position * 0.05)


def content_score(content: str, keywords: tuple[str, ...]) -> float:
    if not content:
        return 0.0

    lowered = content.lower()
    score = 0.0

    # keyword occurrences per 100 characters, 0.5 to 3 reads as on-topic prose
    occurrences = sum(lowered.count(k.lower()) for k in keywords)
    density = occurrences / (len(content) / 100)
    if 0.5 <= density <= 3.0:
        score += 0.5
    elif density > 0.1:
        score += 0.3

    if 500 < len(content) < 5000:
        score += 0.3
    elif len(content) >= 200:
        score += 0.1

    words = [w for w in _WORD_SPLIT_RE.split(content) if w]
    if words and len(set(words)) / len(words) > 0.3:
        score += 0.2

    return min(1.0, max(0.0, score))
