# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
import time

from websearch_core.cache import AsyncTTLCache
from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.errors import ContentFetchError, FetchError, FetchTimeoutError, HttpStatusError
from websearch_core.search.http import HttpFetcher
from websearch_core.search.scraping.extract import extract_main_content, truncate_at_sentence
from websearch_core.search.types import Clock, SearchResult

logger = get_logger(__name__)


class PageContentFetcher:
    """Downloads result pages and reduces them to their readable main text."""

    def __init__(
        self,
        fetcher: HttpFetcher,
        max_length: int | None = None,
        timeout: float | None = None,
        cache: AsyncTTLCache[str, str] | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.fetcher = fetcher
        self.max_length = settings.CONTENT_MAX_LENGTH if max_length is None else max_length
        self.timeout = settings.CONTENT_TIMEOUT if timeout is None else timeout
        if cache is None:
            cache = AsyncTTLCache[str, str](
                max_size=settings.CACHE_MAX_ENTRIES, ttl=settings.CONTENT_CACHE_TTL, clock=clock
            )
        self.cache = cache

    async def fetch_page_content(self, url: str) -> str:
        """
        Main text of the page at `url`, truncated to `max_length` characters.

        Raises:
          ContentFetchError: the page answered with a non-2xx status (the message carries it),
          the request failed or timed out.
        """
        cached = await self.cache.get(url)
        if cached is not None:
            return cached

        try:
            response = await self.fetcher.fetch(url, timeout=self.timeout, referer="https://www.google.com/")
        except HttpStatusError as e:
            raise ContentFetchError(url, f"Failed to load page: HTTP {e.status_code} ({url})", e.status_code) from e
        except FetchTimeoutError as e:
            raise ContentFetchError(url, f"Timed out loading page {url}") from e
        except FetchError as e:
            raise ContentFetchError(url, f"Error fetching page content from {url}: {e!s}") from e

        content = truncate_at_sentence(extract_main_content(response.text), self.max_length)
        await self.cache.set(url, content)
        return content

    async def enrich_with_content(self, results: list[SearchResult]) -> list[SearchResult]:
        """
        Attach page content to each result. A page that cannot be loaded leaves its
        result as it was, title and snippet only.
        """
        semaphore = asyncio.Semaphore(settings.CONTENT_MAX_CONCURRENT)

        async def _enrich(result: SearchResult) -> SearchResult:
            if result.content:
                return result
            async with semaphore:
                try:
                    content = await self.fetch_page_content(result.url)
                except ContentFetchError as e:
                    logger.info(f"Keeping snippet only for {result.url}: {e!s}")
                    return result
            return result.model_copy(update={"content": content})

        return list(await asyncio.gather(*(_enrich(r) for r in results)))
