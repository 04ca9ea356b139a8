# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import pytest

from websearch_core.cache import ResultCache
from websearch_core.emitter import Event
from websearch_core.events import SearchRoundEvent
from websearch_core.search.analysis import analyze_query
from websearch_core.search.errors import NoEligibleStrategyError, ProviderError, SearchExhaustedError
from websearch_core.search.intelligent import MultiRoundConfig, MultiRoundSearch, supplementary_queries
from websearch_core.search.manager import SearchStrategyManager, StrategyManagerConfig
from websearch_core.search.types import SearchQuery

from .conftest import FakeClock, FakeStrategy, make_result

QUERY = SearchQuery(query="flutter development", max_results=10)


def make_search(clock: FakeClock, strategies: list[FakeStrategy], **config: float) -> MultiRoundSearch:
    manager = SearchStrategyManager(
        strategies=strategies,
        config=StrategyManagerConfig(min_success_rate=0.0),
        cache=ResultCache(ttl=1800, clock=clock),
        clock=clock,
    )
    defaults = {"min_relevance": 0.3, "target_score": 100.0, "min_results": 3, "provider_timeout": 0.2}
    return MultiRoundSearch(manager, config=MultiRoundConfig(**{**defaults, **config}))


def test_supplementary_queries() -> None:
    """Follow-up queries combine the strongest keywords and add intent suffixes"""
    assert supplementary_queries(analyze_query("como instalar flutter no windows")) == [
        "instalar flutter",
        "instalar tutorial",
        "instalar explicação",
    ]
    assert supplementary_queries(analyze_query("flutter")) == ["flutter official site"]
    assert supplementary_queries(analyze_query("a an the")) == []


@pytest.mark.asyncio
async def test_concurrent_round_with_slow_provider(clock) -> None:  # noqa: ANN001
    """Results of a round are merged across providers, a slow one just contributes nothing"""
    p1 = FakeStrategy(
        "p1",
        results=[
            make_result("https://docs.flutter.dev/", title="Flutter development docs"),
            make_result("https://flutter.dev/learn", title="Learn flutter"),
            make_result("https://github.com/flutter/flutter", title="Flutter on GitHub"),
        ],
    )
    p2 = FakeStrategy(
        "p2",
        results=[
            make_result("https://docs.flutter.dev", title="Flutter development documentation"),
            make_result("https://medium.com/flutter/development-tips", title="Flutter development tips"),
        ],
    )
    p3 = FakeStrategy("p3", results=[make_result("https://slow.example.com/")], delay=1.0)
    search = make_search(clock, [p1, p2, p3], min_results=4)

    results = await search.search(QUERY)

    assert len(results) == 4
    assert sorted(r.url for r in results) == [
        "https://docs.flutter.dev/",
        "https://flutter.dev/learn",
        "https://github.com/flutter/flutter",
        "https://medium.com/flutter/development-tips",
    ]
    scores = [r.relevance_score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(s is not None and s >= 0.3 for s in scores)
    assert len(p3.calls) == 1
    assert p3.metrics.successful_searches == 0


@pytest.mark.asyncio
async def test_low_relevance_is_dropped(clock) -> None:  # noqa: ANN001
    """Candidates below the relevance threshold never make it into the results"""
    strategy = FakeStrategy(
        "one",
        results=[
            make_result("https://a.example.com/", title="Gardening digest"),
            make_result("https://b.example.com/", title="Flutter development"),
        ],
    )
    search = make_search(clock, [strategy], min_results=1)

    results = await search.search(QUERY)
    assert [r.url for r in results] == ["https://b.example.com/"]


@pytest.mark.asyncio
async def test_rounds_continue_until_enough_results(clock) -> None:  # noqa: ANN001
    """A round short of the minimum moves on to the next batch of providers"""
    first = FakeStrategy("first", results=[make_result("https://a.example.com/")], priority=9)
    second = FakeStrategy("second", results=[make_result("https://b.example.com/")], priority=5)
    unused = FakeStrategy("unused", results=[make_result("https://c.example.com/")], priority=1)
    search = make_search(clock, [first, second, unused], min_results=2, providers_per_round=1)
    events: list[Event] = []

    async def handler(event: Event) -> None:
        events.append(event)

    search.subscribe(handler)
    results = await search.search(QUERY)

    assert len(results) == 2
    assert unused.calls == []
    rounds = [e for e in events if isinstance(e, SearchRoundEvent)]
    assert [(e.round, e.accepted) for e in rounds] == [(1, 1), (2, 2)]


@pytest.mark.asyncio
async def test_supplementary_queries_when_short(clock) -> None:  # noqa: ANN001
    """Too few results after all rounds triggers follow-up queries through the best provider"""
    strategy = FakeStrategy("one", results=[make_result("https://a.example.com/")])
    search = make_search(clock, [strategy], min_results=3, max_rounds=1, max_supplementary_queries=2)

    results = await search.search(QUERY)

    assert [q.query for q in strategy.calls] == [
        "flutter development",
        "development flutter",
        "development official site",
    ]
    # the follow-up queries only returned the same page again
    assert len(results) == 1


@pytest.mark.asyncio
async def test_results_are_cached(clock) -> None:  # noqa: ANN001
    """A repeated query is served from the shared cache"""
    strategy = FakeStrategy("one", results=[make_result("https://a.example.com/")])
    search = make_search(clock, [strategy], min_results=1)

    first = await search.search(QUERY)
    second = await search.search(QUERY)

    assert [r.url for r in second] == [r.url for r in first]
    assert len(strategy.calls) == 1
    cached = await search.manager.cache.get(QUERY, namespace="multi_round")
    assert cached is not None and cached.strategy_name == "multi_round"
    assert await search.manager.cache.get(QUERY) is None


@pytest.mark.asyncio
async def test_plain_and_deep_results_are_cached_apart(clock) -> None:  # noqa: ANN001
    """A deep search never reuses unscored results of a plain search for the same query, nor the reverse"""
    strategy = FakeStrategy(
        "one",
        results=[
            make_result("https://a.example.com/", title="Gardening digest weekly"),
            make_result("https://b.example.com/", title="Flutter development"),
        ],
    )
    search = make_search(clock, [strategy], min_results=1)

    plain = await search.manager.search(QUERY)
    assert len(plain.results) == 2

    deep = await search.search(QUERY)
    assert len(strategy.calls) == 2
    assert [r.url for r in deep] == ["https://b.example.com/"]
    assert all(r.relevance_score is not None and r.relevance_score >= 0.3 for r in deep)

    again = await search.manager.search(QUERY)
    assert again.from_cache is True
    assert again.strategy_name == "one"
    assert len(again.results) == 2


@pytest.mark.asyncio
async def test_all_providers_fail(clock) -> None:  # noqa: ANN001
    """Without a single successful provider the search fails"""
    strategies = [FakeStrategy(f"s{i}", error=ProviderError(f"s{i}", "down")) for i in range(2)]
    search = make_search(clock, strategies, max_supplementary_queries=0)

    with pytest.raises(SearchExhaustedError) as exc_info:
        await search.search(QUERY)
    assert isinstance(exc_info.value.__cause__, ProviderError)


@pytest.mark.asyncio
async def test_no_eligible_strategy(clock) -> None:  # noqa: ANN001
    """No usable provider fails before any round"""
    search = make_search(clock, [])
    with pytest.raises(SearchExhaustedError) as exc_info:
        await search.search(QUERY)
    assert isinstance(exc_info.value.__cause__, NoEligibleStrategyError)
