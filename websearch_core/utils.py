# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import html
import re
from urllib.parse import urlsplit

from pydantic_settings import BaseSettings

from websearch_core.logging import get_logger

logger = get_logger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str | None) -> str:
    """
    Normalize a text fragment scraped from a result page: unescape HTML entities, drop stray
    tags and control characters, and collapse whitespace.
    """
    if not text:
        return ""
    text = html.unescape(text)
    text = _TAG_RE.sub(" ", text)
    text = _CONTROL_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_url(url: str) -> str:
    """
    Reduce a url to scheme://host/path, dropping query, fragment and any trailing slash.
    Two results with the same normalized url are considered duplicates.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return url.strip().lower()

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    path = parts.path.rstrip("/")
    if not scheme or not host:
        return url.strip().lower()
    return f"{scheme}://{host}{path}"


def extract_domain(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host.lower().removeprefix("www.")


def domain_matches(domain: str, candidates: list[str] | tuple[str, ...]) -> bool:
    """True if `domain` equals one of `candidates` or is a subdomain of one."""
    return any(domain == c or domain.endswith(f".{c}") for c in candidates)


def log_settings(settings: BaseSettings, name: str = "Search") -> None:
    logger.info(f"{name} Settings...")
    logger.info(f"  {'Name':<40}{'Default':<40}{'Value':<40}")
    logger.info(f"  {'====':<40}{'=======':<40}{'=====':<40}")
    for field_name, field_info in type(settings).model_fields.items():
        actual_value = getattr(settings, field_name)
        default_value_str = "(required)" if field_info.is_required() else repr(field_info.default)
        logger.info(f"  {field_name:<40}{default_value_str:<40}{actual_value!r:<40}")
