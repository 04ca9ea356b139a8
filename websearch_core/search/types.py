# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import re
import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from websearch_core.utils import clean_text, normalize_url

Clock = Callable[[], float]


class SearchType(str, Enum):
    GENERAL = "general"
    NEWS = "news"


class SearchIntent(str, Enum):
    INFORMATIONAL = "informational"
    TRANSACTIONAL = "transactional"
    NAVIGATIONAL = "navigational"


class SearchQuery(BaseModel):
    model_config = ConfigDict(frozen=True)  # queries are never mutated once issued

    query: str
    type: SearchType = SearchType.GENERAL
    max_results: int = Field(default=5, gt=0)
    domains: tuple[str, ...] = ()
    exclude_terms: tuple[str, ...] = ()
    language: str | None = None

    @field_validator("query")
    @classmethod
    def strip_query(cls, value: str) -> str:
        return value.strip()

    @property
    def is_blank(self) -> bool:
        return not self.query

    @property
    def formatted_query(self) -> str:
        """Query text with domain restrictions and excluded terms in engine operator syntax."""
        parts = [self.query]
        if self.domains:
            parts.append(" OR ".join(f"site:{d}" for d in self.domains))
        parts.extend(f"-{term}" for term in self.exclude_terms)
        return " ".join(p for p in parts if p)

    @property
    def cache_key(self) -> str:
        text = re.sub(r"\s+", " ", self.query.lower())
        domains = ",".join(sorted(d.lower() for d in self.domains))
        return f"{text}_{self.type.value}_{self.max_results}_{domains}"


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    content: str | None = None
    relevance_score: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def clean_title(cls, value: str) -> str:
        value = clean_text(value)
        if not value:
            raise ValueError("title must not be empty")
        return value

    @field_validator("snippet")
    @classmethod
    def clean_snippet(cls, value: str) -> str:
        return clean_text(value)

    @field_validator("url")
    @classmethod
    def check_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"url must use http or https: {value!r}")
        return value

    @property
    def normalized_url(self) -> str:
        return normalize_url(self.url)

    @property
    def source(self) -> str | None:
        return self.metadata.get("source")


class SearchContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_query: str
    keywords: tuple[str, ...]
    intent: SearchIntent
    language: str


class QualifiedSearchResult(BaseModel):
    result: SearchResult
    total_score: float
    factors: dict[str, float]

    @property
    def normalized_url(self) -> str:
        return self.result.normalized_url

    def to_result(self) -> SearchResult:
        return self.result.model_copy(update={"relevance_score": self.total_score})


class StrategyMetrics(BaseModel):
    total_searches: int = 0
    successful_searches: int = 0
    average_response_time: float = 0.0  # milliseconds, successful searches only
    last_updated: float | None = None  # clock reading of the last attempt or reset

    @property
    def success_rate(self) -> float:
        if self.total_searches == 0:
            return 0.0
        return self.successful_searches / self.total_searches

    @property
    def has_history(self) -> bool:
        return self.total_searches > 0

    def record_success(self, elapsed_ms: float, at: float | None = None) -> None:
        self.total_searches += 1
        self.successful_searches += 1
        self.average_response_time += (elapsed_ms - self.average_response_time) / self.successful_searches
        self.last_updated = time.monotonic() if at is None else at

    def record_failure(self, at: float | None = None) -> None:
        self.total_searches += 1
        self.last_updated = time.monotonic() if at is None else at

    def reset(self, at: float | None = None) -> None:
        self.total_searches = 0
        self.successful_searches = 0
        self.average_response_time = 0.0
        self.last_updated = time.monotonic() if at is None else at


class StrategySearchResult(BaseModel):
    results: list[SearchResult]
    strategy_name: str
    execution_time_ms: float = 0.0
    is_successful: bool = True
    from_cache: bool = False
    error: str | None = None


class CachedSearchResult(BaseModel):
    results: list[SearchResult]
    captured_at: float
    ttl: float
    strategy_name: str | None = None

    def is_expired(self, now: float) -> bool:
        return now > self.captured_at + self.ttl
