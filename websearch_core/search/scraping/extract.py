# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import re

from bs4 import BeautifulSoup

from websearch_core.utils import clean_text

NOISE_SELECTORS = (
    "script, style, noscript, iframe, nav, header, footer, aside, form, "
    ".ads, .advertisement, .sidebar, .comments, .social-share, .popup, .modal, .cookie-banner"
)

MAIN_CONTENT_SELECTORS = (
    "article",
    "main",
    "[role=main]",
    ".content",
    ".post-content",
    ".entry-content",
    "#content",
    ".main-content",
    ".post",
    ".entry",
)

MIN_MAIN_CONTENT_LENGTH = 200

_SENTENCE_END_RE = re.compile(r"[.!?](?=\s|$)")


def extract_main_content(html: str) -> str:
    """
    Text of the main content area of an html page, with navigation, ads and other chrome removed.
    The first content container holding a meaningful amount of text wins, the body otherwise.
    """
    soup = BeautifulSoup(html, "lxml")

    for element in soup.select(NOISE_SELECTORS):
        element.decompose()

    for selector in MAIN_CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        text = clean_text(element.get_text(" "))
        if len(text) > MIN_MAIN_CONTENT_LENGTH:
            return text

    body = soup.body or soup
    return clean_text(body.get_text(" "))


def truncate_at_sentence(text: str, max_length: int) -> str:
    """
    Cut `text` to at most `max_length` characters, ending on a sentence boundary when one
    exists in the second half of the allowed span, otherwise on a word boundary with an ellipsis.
    """
    if len(text) <= max_length:
        return text

    window = text[:max_length]
    boundaries = [m.end() for m in _SENTENCE_END_RE.finditer(window)]
    if boundaries and boundaries[-1] >= max_length // 2:
        return window[: boundaries[-1]]

    cut = window[: max_length - 3]
    space = cut.rfind(" ")
    if space >= max_length // 2:
        cut = cut[:space]
    return f"{cut.rstrip()}..."
