# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import re

from websearch_core.config import settings
from websearch_core.search.types import SearchContext, SearchIntent

MAX_KEYWORDS = 10

STOP_WORDS = frozenset(
    {
        # pt
        "o", "os", "as", "um", "uma", "uns", "umas", "de", "do", "da", "dos", "das", "em", "no", "na",
        "nos", "nas", "por", "para", "com", "como", "que", "é", "são", "ao", "aos", "se", "mais",
        # en
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "from",
        "up", "about", "into", "through", "during", "before", "after", "is", "are", "was", "were", "this",
        "that", "these", "those", "its", "it",
    }
)  # fmt: skip

QUESTION_WORDS = (
    "como", "quando", "onde", "por que", "o que", "qual", "quem",
    "how", "when", "where", "why", "what", "which", "who",
)  # fmt: skip
INFORMATIONAL_WORDS = (
    "tutorial", "guia", "explicar", "definição", "conceito",
    "guide", "explain", "definition", "concept",
)  # fmt: skip
TRANSACTIONAL_WORDS = ("comprar", "preço", "valor", "download", "instalar", "buy", "price", "cost", "install")

PORTUGUESE_MARKERS = ("como", "onde", "quando", "por", "que", "para", "com", "uma", "dos")
ENGLISH_MARKERS = ("how", "where", "when", "why", "what", "with", "the", "and", "for")

_NON_WORD_RE = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    return _NON_WORD_RE.sub(" ", text.lower()).split()


def extract_keywords(query: str) -> tuple[str, ...]:
    """Distinct non stop-words longer than two characters, longest first."""
    seen: dict[str, None] = {}
    for word in tokenize(query):
        if len(word) > 2 and word not in STOP_WORDS:
            seen.setdefault(word, None)
    words = sorted(seen, key=len, reverse=True)
    return tuple(words[:MAX_KEYWORDS])


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def detect_intent(query: str) -> SearchIntent:
    text = query.lower()
    if any(_contains_phrase(text, w) for w in QUESTION_WORDS + INFORMATIONAL_WORDS):
        return SearchIntent.INFORMATIONAL
    if any(_contains_phrase(text, w) for w in TRANSACTIONAL_WORDS):
        return SearchIntent.TRANSACTIONAL
    return SearchIntent.NAVIGATIONAL


def detect_language(query: str, default: str | None = None) -> str:
    words = set(tokenize(query))
    pt = sum(1 for w in PORTUGUESE_MARKERS if w in words)
    en = sum(1 for w in ENGLISH_MARKERS if w in words)
    if pt > en:
        return "pt"
    if en > pt:
        return "en"
    return default or settings.SEARCH_LANGUAGE


def analyze_query(query: str) -> SearchContext:
    return SearchContext(
        original_query=query,
        keywords=extract_keywords(query),
        intent=detect_intent(query),
        language=detect_language(query),
    )
