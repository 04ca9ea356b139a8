# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
import random
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from httpx import AsyncClient, HTTPError, TimeoutException
from pydantic import BaseModel

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.errors import FetchError, FetchTimeoutError, HttpStatusError
from websearch_core.search.types import Clock
from websearch_core.search.user_agent import ALTERNATE_USER_AGENT, UserAgentRotator
from websearch_core.utils import extract_domain
from websearch_core.work import WorkerPool

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class HeaderProfile(str, Enum):
    BROWSER = "browser"  # full browser headers, compressed transfer
    IDENTITY = "identity"  # alternate agent, uncompressed transfer
    MINIMAL = "minimal"  # user agent only


class FetchResponse(BaseModel):
    url: str
    status_code: int
    text: str


class DomainRateLimiter:
    """
    Spaces out requests to the same domain by at least `min_delay` plus a random jitter.

    The next free slot for a domain is reserved while holding the lock, the wait itself
    happens outside of it so requests to other domains are never delayed.
    """

    def __init__(
        self,
        min_delay: float | None = None,
        jitter: float | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.min_delay = settings.HTTP_MIN_DOMAIN_DELAY if min_delay is None else min_delay
        self.jitter = settings.HTTP_DOMAIN_DELAY_JITTER if jitter is None else jitter
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._next_slot: dict[str, float] = {}
        self._lock = asyncio.Lock()

    async def wait(self, domain: str) -> float:
        """Block until `domain` may be contacted again. Returns the seconds waited."""
        async with self._lock:
            now = self._clock()
            self._prune(now)
            delay = self.min_delay + (self._rng.uniform(0, self.jitter) if self.jitter > 0 else 0.0)
            last = self._next_slot.get(domain)
            slot = now if last is None else max(now, last + delay)
            self._next_slot[domain] = slot

        wait = slot - now
        if wait > 0:
            logger.debug(f"Rate limiting {domain} for {wait:.3f}s")
            await self._sleep(wait)
        return wait

    def last_request(self, domain: str) -> float | None:
        return self._next_slot.get(domain)

    def _prune(self, now: float) -> None:
        # a slot older than the longest possible delay no longer constrains its domain
        horizon = now - (self.min_delay + self.jitter)
        for domain in [d for d, slot in self._next_slot.items() if slot < horizon]:
            del self._next_slot[domain]


class HttpFetcher:
    """
    Outbound GET requests with rotating user agents, browser-like headers,
    per-domain spacing and a global request throttle. No retries at this level.
    """

    def __init__(
        self,
        client: AsyncClient | None = None,
        rate_limiter: DomainRateLimiter | None = None,
        user_agents: UserAgentRotator | None = None,
        pool: WorkerPool | None = None,
        timeout: float | None = None,
        language: str | None = None,
    ) -> None:
        self._owns_client = client is None
        self.client = client or AsyncClient(follow_redirects=settings.HTTP_FOLLOW_REDIRECTS)
        self.rate_limiter = DomainRateLimiter() if rate_limiter is None else rate_limiter
        self.user_agents = user_agents or UserAgentRotator()
        self.pool = pool or WorkerPool.for_requests(name="http")
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.language = language or settings.SEARCH_LANGUAGE

    def build_headers(
        self,
        profile: HeaderProfile = HeaderProfile.BROWSER,
        referer: str | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> dict[str, str]:
        if profile == HeaderProfile.MINIMAL:
            headers = {"User-Agent": self.user_agents.next()}
        else:
            headers = {
                "User-Agent": self.user_agents.next() if profile == HeaderProfile.BROWSER else ALTERNATE_USER_AGENT,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
                "Accept-Language": _accept_language(self.language),
                "Accept-Encoding": "gzip, deflate" if profile == HeaderProfile.BROWSER else "identity",
                "DNT": "1",
                "Connection": "keep-alive",
                "Upgrade-Insecure-Requests": "1",
            }
            if referer:
                headers["Referer"] = referer

        if extra_headers:
            headers.update(extra_headers)
        return headers

    async def fetch(
        self,
        url: str,
        extra_headers: dict[str, str] | None = None,
        timeout: float | None = None,
        profile: HeaderProfile = HeaderProfile.BROWSER,
        referer: str | None = None,
    ) -> FetchResponse:
        domain = extract_domain(url)
        if domain is None:
            raise FetchError(f"Invalid url {url!r}", url=url)

        await self.rate_limiter.wait(domain)
        headers = self.build_headers(profile=profile, referer=referer, extra_headers=extra_headers)

        try:
            async with self.pool.throttle():
                response = await self.client.get(url, headers=headers, timeout=timeout or self.timeout)
        except TimeoutException as e:
            raise FetchTimeoutError(f"Timed out fetching {url}", url=url) from e
        except HTTPError as e:
            raise FetchError(f"Error fetching {url}: {e!r}", url=url) from e

        if not 200 <= response.status_code < 300:
            raise HttpStatusError(url, response.status_code)

        return FetchResponse(url=str(response.url), status_code=response.status_code, text=response.text)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()


def _accept_language(language: str) -> str:
    if language == "pt":
        return "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7"
    if language == "en":
        return "en-US,en;q=0.9"
    return f"{language},en-US;q=0.8,en;q=0.7"
