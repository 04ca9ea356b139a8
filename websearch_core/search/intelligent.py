# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio

from pydantic import BaseModel, Field

from websearch_core.config import settings
from websearch_core.emitter import EventEmitter
from websearch_core.events import CacheHitEvent, SearchRoundEvent
from websearch_core.logging import get_logger_with_prefix
from websearch_core.search.analysis import analyze_query
from websearch_core.search.errors import NoEligibleStrategyError, SearchExhaustedError
from websearch_core.search.manager import SearchStrategyManager
from websearch_core.search.mixins import QualifiedSearchResultsMixin
from websearch_core.search.scorer import QualityScorer
from websearch_core.search.scraping.content import PageContentFetcher
from websearch_core.search.strategy import SearchStrategy
from websearch_core.search.types import (
    QualifiedSearchResult,
    SearchContext,
    SearchIntent,
    SearchQuery,
    SearchResult,
)

MULTI_ROUND_STRATEGY = "multi_round"
SUPPLEMENTARY_SOURCE_WEIGHT = 0.8
SUPPLEMENTARY_MAX_RESULTS = 5

INTENT_SUFFIXES: dict[str, dict[SearchIntent, tuple[str, ...]]] = {
    "en": {
        SearchIntent.INFORMATIONAL: ("tutorial", "explained"),
        SearchIntent.TRANSACTIONAL: ("how to", "step by step"),
        SearchIntent.NAVIGATIONAL: ("official site",),
    },
    "pt": {
        SearchIntent.INFORMATIONAL: ("tutorial", "explicação"),
        SearchIntent.TRANSACTIONAL: ("como fazer", "passo a passo"),
        SearchIntent.NAVIGATIONAL: ("site oficial",),
    },
}


class MultiRoundConfig(BaseModel):
    min_relevance: float = Field(default_factory=lambda: settings.QUALITY_MIN_RELEVANCE, ge=0.0)
    target_score: float = Field(default_factory=lambda: settings.QUALITY_TARGET_SCORE, gt=0)
    min_results: int = Field(default_factory=lambda: settings.QUALITY_MIN_RESULTS, ge=1)
    max_results: int = Field(default_factory=lambda: settings.QUALITY_MAX_RESULTS, ge=1)
    max_rounds: int = Field(default_factory=lambda: settings.QUALITY_MAX_ROUNDS, ge=1)
    providers_per_round: int = Field(default_factory=lambda: settings.QUALITY_PROVIDERS_PER_ROUND, ge=1)
    provider_timeout: float = Field(default_factory=lambda: settings.QUALITY_PROVIDER_TIMEOUT, gt=0)
    max_supplementary_queries: int = Field(default_factory=lambda: settings.QUALITY_MAX_SUPPLEMENTARY_QUERIES, ge=0)
    enrich_content: bool = Field(default_factory=lambda: settings.QUALITY_ENRICH_CONTENT)


def supplementary_queries(context: SearchContext) -> list[str]:
    """Narrower follow-up queries: the two strongest keywords together, then the top keyword with intent suffixes"""
    if not context.keywords:
        return []

    queries: list[str] = []
    if len(context.keywords) >= 2:
        queries.append(f"{context.keywords[0]} {context.keywords[1]}")

    suffixes = INTENT_SUFFIXES.get(context.language, INTENT_SUFFIXES["en"])[context.intent]
    queries.extend(f"{context.keywords[0]} {suffix}" for suffix in suffixes)
    return queries


class _SearchSession(QualifiedSearchResultsMixin):
    """Candidates gathered for one multi-round search."""

    def __init__(self) -> None:
        super().__init__()
        self.seen_urls: set[str] = set()
        self.succeeded = False
        self.last_error: BaseException | None = None

    @property
    def accepted(self) -> list[QualifiedSearchResult]:
        return self.qualified_results

    @property
    def total_score(self) -> float:
        return sum(q.total_score for q in self.qualified_results)

    def accept(self, qualified: QualifiedSearchResult) -> None:
        self.add_qualified_result(qualified)


class MultiRoundSearch(EventEmitter):
    """
    Quality driven search. Each round queries the next batch of ranked strategies concurrently,
    scores every new candidate and keeps those above the relevance threshold. Rounds continue
    until the aggregate score reaches the target or enough results were found.
    """

    def __init__(
        self,
        manager: SearchStrategyManager,
        scorer: QualityScorer | None = None,
        content_fetcher: PageContentFetcher | None = None,
        config: MultiRoundConfig | None = None,
        session_id: str | None = None,
    ) -> None:
        super().__init__()
        self.manager = manager
        self.scorer = scorer or QualityScorer()
        self.content_fetcher = content_fetcher
        self.config = config or MultiRoundConfig()
        self.logger = get_logger_with_prefix(__name__, "MultiRoundSearch", session_id)

    def _is_satisfied(self, session: _SearchSession) -> bool:
        return session.total_score >= self.config.target_score or len(session.accepted) >= self.config.min_results

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        cached = await self.manager.cache.get(query, namespace=MULTI_ROUND_STRATEGY)
        if cached is not None:
            await self._emit(
                CacheHitEvent(query=query.query, strategy=cached.strategy_name, result_count=len(cached.results))
            )
            return cached.results

        strategies = self.manager.rank_strategies(self.manager.eligible_strategies(query))
        if not strategies:
            cause = NoEligibleStrategyError(f"No strategy available for {query.query!r}")
            raise SearchExhaustedError(query.query, 0, cause) from cause

        context = analyze_query(query.query)
        session = _SearchSession()
        per_round = self.config.providers_per_round

        for round_index in range(self.config.max_rounds):
            batch = strategies[round_index * per_round : (round_index + 1) * per_round]
            if not batch:
                break

            candidates = await self._run_round(query, context, batch, round_index * per_round, session)
            self._accept_round(candidates, session)

            self.logger.info(
                f"Round {round_index + 1}: {len(session.accepted)} results, total score {session.total_score:.2f}"
            )
            await self._emit(
                SearchRoundEvent(
                    query=query.query,
                    round=round_index + 1,
                    accepted=len(session.accepted),
                    total_score=session.total_score,
                )
            )

            if self._is_satisfied(session):
                break

        if not self._is_satisfied(session):
            await self._run_supplementary(query, context, strategies[0], session)

        if not session.accepted and not session.succeeded:
            raise SearchExhaustedError(query.query, len(strategies), session.last_error) from session.last_error

        results = [q.to_result() for q in session.accepted[: query.max_results]]
        await self.manager.cache.put(
            query, results, strategy_name=MULTI_ROUND_STRATEGY, namespace=MULTI_ROUND_STRATEGY
        )
        return results

    async def _run_strategy(
        self, strategy: SearchStrategy, query: SearchQuery, session: _SearchSession
    ) -> list[SearchResult]:
        try:
            results = await self.manager.execute_strategy(strategy, query, timeout=self.config.provider_timeout)
        except Exception as e:
            # slow or failing providers count as empty, siblings are unaffected
            self.logger.info(f"{strategy.name} contributed nothing: {e!r}")
            session.last_error = e
            return []

        session.succeeded = True
        return results

    async def _prepare(self, results: list[SearchResult], session: _SearchSession) -> list[tuple[int, SearchResult]]:
        fresh: list[tuple[int, SearchResult]] = []
        for position, result in enumerate(results):
            if result.normalized_url in session.seen_urls:
                continue
            session.seen_urls.add(result.normalized_url)
            fresh.append((position, result))

        if self.config.enrich_content and self.content_fetcher is not None and fresh:
            enriched = await self.content_fetcher.enrich_with_content([r for _, r in fresh])
            fresh = [(position, r) for (position, _), r in zip(fresh, enriched, strict=True)]
        return fresh

    async def _run_round(
        self,
        query: SearchQuery,
        context: SearchContext,
        batch: list[SearchStrategy],
        source_offset: int,
        session: _SearchSession,
    ) -> list[QualifiedSearchResult]:
        per_source = await asyncio.gather(*(self._run_strategy(s, query, session) for s in batch))

        candidates: list[QualifiedSearchResult] = []
        for index, results in enumerate(per_source):
            source_weight = max(0.1, 1.0 - (source_offset + index) * 0.1)
            for position, result in await self._prepare(results, session):
                qualified = self.scorer.score(result, context, source_weight=source_weight, position=position)
                if qualified.total_score >= self.config.min_relevance:
                    candidates.append(qualified)
        return candidates

    def _accept_round(self, candidates: list[QualifiedSearchResult], session: _SearchSession) -> None:
        for qualified in sorted(candidates, key=lambda q: q.total_score, reverse=True):
            if len(session.accepted) >= self.config.max_results:
                break
            session.accept(qualified)

    async def _run_supplementary(
        self, query: SearchQuery, context: SearchContext, strategy: SearchStrategy, session: _SearchSession
    ) -> None:
        for text in supplementary_queries(context)[: self.config.max_supplementary_queries]:
            if len(session.accepted) >= self.config.max_results:
                break

            sub_query = SearchQuery(
                query=text, type=query.type, max_results=SUPPLEMENTARY_MAX_RESULTS, language=query.language
            )
            if not strategy.can_handle(sub_query):
                continue

            self.logger.info(f"Supplementary query '{text}' via {strategy.name}")
            results = await self._run_strategy(strategy, sub_query, session)
            for _, result in await self._prepare(results, session):
                qualified = self.scorer.score(result, context, source_weight=SUPPLEMENTARY_SOURCE_WEIGHT, position=0)
                if len(session.accepted) >= self.config.max_results:
                    break
                if qualified.total_score >= self.config.min_relevance:
                    session.accept(qualified)
