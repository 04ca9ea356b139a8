# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.analysis import extract_keywords
from websearch_core.search.types import SearchResult
from websearch_core.utils import domain_matches, extract_domain

logger = get_logger(__name__)

# Result pages of the engines themselves and social networks never make useful sources
BLOCKED_DOMAINS: tuple[str, ...] = (
    "google.com",
    "bing.com",
    "duckduckgo.com",
    "yandex.com",
    "yandex.ru",
    "startpage.com",
    "facebook.com",
    "twitter.com",
    "x.com",
    "instagram.com",
    "linkedin.com",
)

AD_INDICATORS: tuple[str, ...] = (
    "googleadservices",
    "doubleclick",
    "googlesyndication",
    "ads.",
    "/ads/",
    "advertisement",
    "sponsored",
    "/aclk?",
    "/pagead/",
)


class ResultFilter:
    """Decides whether a parsed candidate is acceptable as a search result."""

    def __init__(
        self,
        min_title_length: int | None = None,
        min_keyword_fraction: float | None = None,
        blocked_domains: tuple[str, ...] = BLOCKED_DOMAINS,
        ad_indicators: tuple[str, ...] = AD_INDICATORS,
    ) -> None:
        self.min_title_length = settings.PARSER_MIN_TITLE_LENGTH if min_title_length is None else min_title_length
        self.min_keyword_fraction = (
            settings.PARSER_MIN_KEYWORD_FRACTION if min_keyword_fraction is None else min_keyword_fraction
        )
        self.blocked_domains = blocked_domains
        self.ad_indicators = ad_indicators

    def is_valid_url(self, url: str) -> bool:
        if not url.startswith(("http://", "https://")):
            return False

        domain = extract_domain(url)
        if domain is None or domain_matches(domain, self.blocked_domains):
            return False

        lowered = url.lower()
        return not any(indicator in lowered for indicator in self.ad_indicators)

    def is_relevant(self, title: str, snippet: str, query: str) -> bool:
        if self.min_keyword_fraction <= 0:
            return True

        keywords = extract_keywords(query)
        if not keywords:
            return True

        text = f"{title} {snippet}".lower()
        matched = sum(1 for k in keywords if k in text)
        return matched / len(keywords) >= self.min_keyword_fraction

    def accept(self, title: str, url: str, snippet: str, query: str) -> bool:
        if len(title) <= self.min_title_length:
            return False
        if not self.is_valid_url(url):
            logger.debug(f"Rejected url {url}")
            return False
        return self.is_relevant(title, snippet, query)

    def apply(self, results: list[SearchResult], query: str) -> list[SearchResult]:
        return [r for r in results if self.accept(r.title, r.url, r.snippet, query)]
