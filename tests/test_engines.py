# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import json
from urllib.parse import parse_qs, urlsplit

import pytest

from websearch_core.search.engines.bing import BingSearch
from websearch_core.search.engines.duckduckgo import DuckDuckGoSearch
from websearch_core.search.engines.duckduckgo_api import DuckDuckGoInstantAnswerSearch
from websearch_core.search.engines.factory import ENGINES, SearchEngineFactory
from websearch_core.search.engines.google import GoogleSearch
from websearch_core.search.engines.searx import SearxSearch
from websearch_core.search.engines.startpage import StartPageSearch
from websearch_core.search.engines.wikipedia import WikipediaSearch
from websearch_core.search.engines.yandex import YandexSearch
from websearch_core.search.filter import ResultFilter
from websearch_core.search.types import SearchQuery, SearchType

QUERY = SearchQuery(query="flutter development", max_results=5)

GOOGLE_HTML = """
<html><body>
  <div class="MjjYud">
    <div class="yuRUbf"><a href="/url?q=https://docs.flutter.dev/get-started&amp;sa=U"><h3>Get started with Flutter</h3></a></div>
    <div class="VwiC3b">Install Flutter and build your first app.</div>
  </div>
  <div class="MjjYud">
    <a href="https://github.com/flutter/flutter"><h3 class="LC20lb">flutter/flutter on GitHub</h3></a>
    <span class="VwiC3b">Flutter makes it easy to build apps.</span>
  </div>
  <div class="MjjYud">
    <a href="https://www.googleadservices.com/pagead/aclk?sa=L"><h3>Sponsored Flutter course</h3></a>
  </div>
  <div class="MjjYud">
    <a href="https://www.youtube.com/flutter"><h3>Yt</h3></a>
  </div>
  <div class="MjjYud"><h3>No link at all here</h3></div>
</body></html>
"""  # noqa: E501

BING_HTML = """
<html><body><ol id="b_results">
  <li class="b_algo">
    <h2><a href="https://flutter.dev/development">Flutter development overview</a></h2>
    <div class="b_caption"><p>Build apps for any screen with <strong>Flutter</strong>.</p></div>
  </li>
  <li class="b_algo">
    <h2><a href="https://www.bing.com/aclick?ld=1">Flutter on Bing itself</a></h2>
  </li>
  <li class="b_algo">
    <div class="b_title"><a href="https://medium.com/flutter/development-tips">Flutter development tips</a></div>
    <div class="b_snippet">Ten tips.</div>
  </li>
</ol></body></html>
"""

DUCKDUCKGO_HTML = """
<html><body>
  <div class="result results_links web-result">
    <h2 class="result__title">
      <a class="result__a" href="//duckduckgo.com/l/?uddg=https%3A%2F%2Fdart.dev%2Fflutter&amp;rut=abc">Dart and Flutter</a>
    </h2>
    <a class="result__snippet">Flutter is powered by Dart.</a>
  </div>
  <div class="result">
    <h2 class="result__title"><a class="result__a" href="https://pub.dev/packages/provider">provider package</a></h2>
    <div class="result__snippet">State management for Flutter development.</div>
  </div>
</body></html>
"""  # noqa: E501

STARTPAGE_HTML = """
<div class="w-gl__result">
  <h3><a class="w-gl__result-title" href="https://docs.flutter.dev/ui">Building user interfaces</a></h3>
  <p class="w-gl__description">Widgets all the way down.</p>
</div>
"""

YANDEX_HTML = """
<ul>
  <li class="serp-item">
    <div class="organic__title-wrapper"><a href="https://habr.com/flutter">Flutter development notes</a></div>
    <div class="organic__text">Notes from production.</div>
  </li>
</ul>
"""


def test_google_parse() -> None:
    results = GoogleSearch().parse(GOOGLE_HTML, QUERY)

    assert [r.url for r in results] == ["https://docs.flutter.dev/get-started", "https://github.com/flutter/flutter"]
    assert results[0].title == "Get started with Flutter"
    assert results[0].snippet == "Install Flutter and build your first app."
    assert all(r.source == "google" for r in results)


def test_google_falls_back_to_next_selector_set() -> None:
    html = '<div class="tF2Cxc"><a href="https://flutter.dev/"><h3>Flutter homepage</h3></a></div>'
    results = GoogleSearch().parse(html, QUERY)
    assert [r.url for r in results] == ["https://flutter.dev/"]


def test_google_request() -> None:
    request = GoogleSearch().build_request(SearchQuery(query="flutter", type=SearchType.NEWS), "en")
    params = parse_qs(urlsplit(request.url).query)
    assert params["q"] == ["flutter"]
    assert params["tbm"] == ["nws"]
    assert params["hl"] == ["en"]


def test_bing_parse() -> None:
    results = BingSearch().parse(BING_HTML, QUERY)

    assert [r.url for r in results] == [
        "https://flutter.dev/development",
        "https://medium.com/flutter/development-tips",
    ]
    assert results[0].snippet == "Build apps for any screen with Flutter ."
    assert results[1].snippet == "Ten tips."


def test_bing_news_request() -> None:
    request = BingSearch().build_request(SearchQuery(query="flutter", type=SearchType.NEWS), "pt")
    assert request.url.startswith("https://www.bing.com/news/search?")
    assert "mkt=pt-BR" in request.url


def test_duckduckgo_parse() -> None:
    results = DuckDuckGoSearch().parse(DUCKDUCKGO_HTML, QUERY)

    assert [r.url for r in results] == ["https://dart.dev/flutter", "https://pub.dev/packages/provider"]
    assert results[0].snippet == "Flutter is powered by Dart."


def test_startpage_parse() -> None:
    results = StartPageSearch().parse(STARTPAGE_HTML, QUERY)
    assert [(r.title, r.url) for r in results] == [("Building user interfaces", "https://docs.flutter.dev/ui")]


def test_yandex_parse() -> None:
    results = YandexSearch().parse(YANDEX_HTML, QUERY)
    assert [r.url for r in results] == ["https://habr.com/flutter"]
    assert results[0].snippet == "Notes from production."


def test_html_parse_of_garbage() -> None:
    assert GoogleSearch().parse("", QUERY) == []
    assert BingSearch().parse("<<<not html>>>", QUERY) == []


def test_searx_parse() -> None:
    body = json.dumps(
        {
            "results": [
                {"title": "Flutter documentation", "url": "https://docs.flutter.dev/", "content": "Docs."},
                {"title": "Broken", "url": None},
                "not a dict",
                {"title": "Flutter on Twitter", "url": "https://twitter.com/flutterdev", "content": ""},
            ]
        }
    )
    results = SearxSearch(base_url="https://searx.example").parse(body, QUERY)

    assert [r.url for r in results] == ["https://docs.flutter.dev/"]
    assert SearxSearch(base_url="https://searx.example").parse("{not json", QUERY) == []


def test_searx_request() -> None:
    request = SearxSearch(base_url="https://searx.example/").build_request(QUERY, "en")
    params = parse_qs(urlsplit(request.url).query)
    assert request.url.startswith("https://searx.example/?")
    assert params["format"] == ["json"]
    assert params["categories"] == ["general"]


def test_wikipedia_parse() -> None:
    body = json.dumps(
        {
            "query": {
                "search": [
                    {
                        "pageid": 52357339,
                        "title": "Flutter (software)",
                        "snippet": '<span class="searchmatch">Flutter</span> is an open-source UI toolkit',
                    },
                    {"pageid": 61032, "title": "Dart (programming language)", "snippet": "Dart is a language"},
                    {"pageid": 7713, "title": "Cross-platform software", "snippet": "Software for several platforms"},
                    {"title": "Missing page id"},
                ]
            }
        }
    )
    engine = WikipediaSearch(language="pt")
    results = engine.parse(body, QUERY)

    assert [r.url for r in results] == [
        "https://pt.wikipedia.org/wiki/Flutter_(software)",
        "https://pt.wikipedia.org/wiki/Dart_(programming_language)",
        "https://pt.wikipedia.org/wiki/Cross-platform_software",
    ]
    assert results[0].snippet == "Flutter is an open-source UI toolkit"
    assert results[0].metadata["page_id"] == 52357339

    request = engine.build_request(QUERY, "pt")
    assert request.url.startswith("https://pt.wikipedia.org/w/api.php?")
    assert "srlimit=5" in request.url


def test_duckduckgo_api_parse() -> None:
    body = json.dumps(
        {
            "Heading": "Flutter (software)",
            "Abstract": "Flutter is an open-source UI software development kit.",
            "AbstractURL": "https://en.wikipedia.org/wiki/Flutter_(software)",
            "RelatedTopics": [
                {"Text": "Dart language - A client optimized language.", "FirstURL": "https://dart.dev/overview"},
                {"Name": "Group", "Topics": [{"Text": "Flutter widgets - UI building blocks", "FirstURL": "https://example.org/widgets"}]},  # noqa: E501
                {"Text": "Internal topic page", "FirstURL": "https://duckduckgo.com/Flutter"},
            ],
        }
    )
    results = DuckDuckGoInstantAnswerSearch().parse(body, QUERY)

    assert [r.url for r in results] == [
        "https://en.wikipedia.org/wiki/Flutter_(software)",
        "https://dart.dev/overview",
        "https://example.org/widgets",
    ]
    assert results[0].title == "Flutter (software)"
    assert results[1].title == "Dart language"
    assert results[1].snippet == "A client optimized language."


def test_duckduckgo_api_definition_fallback() -> None:
    body = json.dumps(
        {
            "Heading": "Flutter",
            "Definition": "flutter definition: to move with quick wavering motions.",
            "DefinitionURL": "https://www.merriam-webster.com/dictionary/flutter",
            "RelatedTopics": [],
        }
    )
    results = DuckDuckGoInstantAnswerSearch().parse(body, SearchQuery(query="flutter"))
    assert [r.metadata["kind"] for r in results] == ["definition"]


def test_keyword_prefilter() -> None:
    """With a keyword fraction configured, off-topic candidates are dropped"""
    engine = StartPageSearch(result_filter=ResultFilter(min_keyword_fraction=0.5))
    html = """
    <div class="w-gl__result"><h3><a class="w-gl__result-title" href="https://a.example/">Flutter development</a></h3></div>
    <div class="w-gl__result"><h3><a class="w-gl__result-title" href="https://b.example/">Gardening digest</a></h3></div>
    """  # noqa: E501
    assert [r.url for r in engine.parse(html, QUERY)] == ["https://a.example/"]


@pytest.mark.parametrize("provider", sorted(ENGINES))
def test_factory(provider: str) -> None:
    engine = SearchEngineFactory.create(provider)
    assert engine.name == provider
    assert engine.build_request(QUERY, "en").url.startswith("https://")


def test_factory_unknown_provider() -> None:
    with pytest.raises(ValueError):
        SearchEngineFactory.create("altavista")
