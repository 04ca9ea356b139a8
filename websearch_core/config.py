# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ProviderName = Literal[
    "google",
    "bing",
    "duckduckgo",
    "duckduckgo_api",
    "startpage",
    "yandex",
    "searx",
    "wikipedia",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="allow")

    # Providers
    SEARCH_PROVIDERS: list[ProviderName] = Field(
        default=["google", "duckduckgo", "bing", "startpage", "searx", "wikipedia", "duckduckgo_api", "yandex"],
        description="Search providers registered with the strategy manager, in registration order",
    )
    SEARCH_LANGUAGE: str = Field(default="en", description="Preferred result language (two letter code)")
    SEARCH_MAX_RESULTS: int = Field(default=5, description="Default number of results returned per search", ge=1)
    SEARX_BASE_URL: str = Field(default="https://searx.be", description="Searx instance queried through its JSON API")

    # HTTP fetcher
    HTTP_TIMEOUT: float = Field(default=10, description="Default timeout in seconds for outbound requests", gt=0)
    HTTP_MIN_DOMAIN_DELAY: float = Field(
        default=0.3, description="Minimum seconds between two requests to the same domain", ge=0
    )
    HTTP_DOMAIN_DELAY_JITTER: float = Field(
        default=0.2, description="Upper bound of the random delay added to the per-domain minimum", ge=0
    )
    HTTP_FOLLOW_REDIRECTS: bool = Field(default=True, description="Follow redirects on outbound requests")

    # Request throttle
    MAX_CONCURRENT_REQUESTS: int = Field(
        default=16, description="The max. number of outbound requests that can run simultaneously", ge=1
    )
    RATE_LIMIT_REQUESTS: int = Field(default=20, description="Rate limit for requests in specified rate period", ge=1)
    RATE_PERIOD_REQUESTS: float = Field(
        default=2, description="Rate period in seconds, use with rate limit to implement throttle", gt=0
    )

    # Circuit breaker
    CIRCUIT_FAILURE_THRESHOLD: int = Field(
        default=3, description="Consecutive failures before a provider circuit opens", ge=1
    )
    CIRCUIT_COOLDOWN: float = Field(
        default=30, description="Seconds an open circuit waits before allowing a trial request", ge=0
    )
    CIRCUIT_SUCCESS_THRESHOLD: int = Field(
        default=2, description="Consecutive half-open successes required to close a circuit", ge=1
    )

    # Strategy manager
    STRATEGY_MAX_FALLBACK_ATTEMPTS: int = Field(
        default=3, description="The max. number of distinct strategies attempted for one query", ge=1
    )
    STRATEGY_MIN_SUCCESS_RATE: float = Field(
        default=0.3, description="Strategies with history below this success rate are skipped", ge=0.0, le=1.0
    )
    HEALTH_CHECK_INTERVAL: float = Field(default=300, description="Seconds between health check sweeps", gt=0)
    HEALTH_CHECK_GRACE_PERIOD: float = Field(
        default=120, description="Idle seconds after which an open circuit is reset by the health check", ge=0
    )

    # Result cache
    CACHE_TTL: float = Field(default=1800, description="Seconds a cached search result stays valid", gt=0)
    CACHE_CLEANUP_INTERVAL: float = Field(default=600, description="Seconds between cache cleanup sweeps", gt=0)
    CACHE_MAX_ENTRIES: int = Field(default=100, description="The max. number of cached query keys", ge=1)
    CACHE_MAX_HISTORY: int = Field(default=5, description="Cached results kept per query key", ge=1)

    # Page content
    CONTENT_MAX_LENGTH: int = Field(
        default=3000, description="Max size of fetched page content in characters, anything larger is truncated."
    )
    CONTENT_TIMEOUT: float = Field(default=15, description="Seconds elapsed before a page fetch times out.", gt=0)
    CONTENT_CACHE_TTL: float = Field(default=3600, description="Seconds fetched page content is cached", gt=0)
    CONTENT_MAX_CONCURRENT: int = Field(
        default=3, description="The max. number of pages fetched at once when enriching results", ge=1
    )

    # Quality ranking
    QUALITY_MIN_RELEVANCE: float = Field(
        default=0.3, description="Minimum quality score for a result to enter the candidate pool", ge=0.0, le=1.0
    )
    QUALITY_TARGET_SCORE: float = Field(
        default=2.0, description="Aggregate quality score at which multi-round search stops", gt=0
    )
    QUALITY_MIN_RESULTS: int = Field(
        default=3, description="Result count at which multi-round search stops", ge=1
    )
    QUALITY_MAX_RESULTS: int = Field(default=15, description="The max. number of candidates kept across rounds", ge=1)
    QUALITY_MAX_ROUNDS: int = Field(default=3, description="The max. number of provider rounds", ge=1)
    QUALITY_PROVIDERS_PER_ROUND: int = Field(
        default=3, description="Providers queried concurrently in each multi-round search round", ge=1
    )
    QUALITY_PROVIDER_TIMEOUT: float = Field(
        default=8, description="Seconds a provider may take in a multi-round search before it counts as empty", gt=0
    )
    QUALITY_MAX_SUPPLEMENTARY_QUERIES: int = Field(
        default=2, description="The max. number of targeted follow-up queries", ge=0
    )
    QUALITY_ENRICH_CONTENT: bool = Field(
        default=False, description="Fetch page content for candidates before scoring"
    )

    # Parsers
    PARSER_MIN_TITLE_LENGTH: int = Field(
        default=5, description="Results with a title this short or shorter are dropped", ge=0
    )
    PARSER_MIN_KEYWORD_FRACTION: float = Field(
        default=0.0,
        description="Fraction of query keywords that must appear in title or snippet, 0 disables the pre-filter",
        ge=0.0,
        le=1.0,
    )

    log_level: Literal["FATAL", "ERROR", "WARNING", "INFO", "DEBUG"] = Field(
        default="INFO", description="Set the log level for the search subsystem"
    )

    @model_validator(mode="after")
    def check_consistency(self) -> "Settings":
        if not self.SEARCH_PROVIDERS:
            raise ValueError("SEARCH_PROVIDERS must name at least one provider")

        if len(set(self.SEARCH_PROVIDERS)) != len(self.SEARCH_PROVIDERS):
            raise ValueError("SEARCH_PROVIDERS must not contain duplicates")

        if self.QUALITY_MIN_RESULTS > self.QUALITY_MAX_RESULTS:
            raise ValueError("QUALITY_MIN_RESULTS must not exceed QUALITY_MAX_RESULTS")

        if self.CONTENT_MAX_LENGTH < 200:
            raise ValueError("CONTENT_MAX_LENGTH must be at least 200 characters")

        return self


settings = Settings()  # type: ignore[call-arg]
