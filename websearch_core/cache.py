# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import asyncio
import time
from collections import OrderedDict
from typing import Generic, TypeVar

from websearch_core.config import settings
from websearch_core.logging import get_logger
from websearch_core.search.types import CachedSearchResult, Clock, SearchQuery, SearchResult

logger = get_logger(__name__)

K = TypeVar("K", bound=str)  # Key type
V = TypeVar("V")  # Value type


class AsyncTTLCache(Generic[K, V]):
    """LRU cache whose entries also expire `ttl` seconds after they were set."""

    def __init__(self, max_size: int, ttl: float, clock: Clock = time.monotonic) -> None:
        self._cache: OrderedDict[K, tuple[V, float]] = OrderedDict()
        self._max_size = max_size
        self._ttl = ttl
        self._clock = clock
        self._lock = asyncio.Lock()

    async def exists(self, key: K) -> bool:
        return await self.get(key) is not None

    async def get(self, key: K) -> V | None:
        async with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() > expires_at:
                del self._cache[key]
                return None
            self._cache.move_to_end(key)  # mark as recently used
            return value

    async def set(self, key: K, value: V) -> None:
        async with self._lock:
            if key in self._cache:
                self._cache.move_to_end(key)
            self._cache[key] = (value, self._clock() + self._ttl)
            if len(self._cache) > self._max_size:
                self._cache.popitem(last=False)  # remove least recently used

    async def delete(self, key: K) -> None:
        async with self._lock:
            self._cache.pop(key, None)

    async def cleanup(self) -> int:
        async with self._lock:
            now = self._clock()
            expired = [k for k, (_, expires_at) in self._cache.items() if now > expires_at]
            for k in expired:
                del self._cache[k]
            return len(expired)

    def __len__(self) -> int:
        return len(self._cache)


class ResultCache:
    """
    Committed search outcomes keyed by normalized query. Each key keeps a short history,
    lookups return the most recent entry that has not expired. Pipelines that post-process
    results store them under their own `namespace` so plain and scored lists never mix.
    """

    def __init__(
        self,
        ttl: float | None = None,
        max_entries: int | None = None,
        max_history: int | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.ttl = settings.CACHE_TTL if ttl is None else ttl
        self.max_entries = settings.CACHE_MAX_ENTRIES if max_entries is None else max_entries
        self.max_history = settings.CACHE_MAX_HISTORY if max_history is None else max_history
        self._clock = clock
        self._entries: OrderedDict[str, list[CachedSearchResult]] = OrderedDict()
        self._lock = asyncio.Lock()

    @staticmethod
    def key_for(query: SearchQuery, namespace: str | None = None) -> str:
        return f"{namespace}:{query.cache_key}" if namespace else query.cache_key

    async def get(self, query: SearchQuery, namespace: str | None = None) -> CachedSearchResult | None:
        key = self.key_for(query, namespace)
        async with self._lock:
            history = self._entries.get(key)
            if not history:
                return None

            now = self._clock()
            valid = [entry for entry in history if not entry.is_expired(now)]
            if not valid:
                del self._entries[key]
                logger.debug(f"Cache entry expired for '{query.query}'")
                return None

            self._entries[key] = valid
            self._entries.move_to_end(key)
            return valid[-1]

    async def put(
        self,
        query: SearchQuery,
        results: list[SearchResult],
        strategy_name: str | None = None,
        ttl: float | None = None,
        namespace: str | None = None,
    ) -> None:
        if not results:
            return

        key = self.key_for(query, namespace)
        entry = CachedSearchResult(
            results=list(results),
            captured_at=self._clock(),
            ttl=self.ttl if ttl is None else ttl,
            strategy_name=strategy_name,
        )
        async with self._lock:
            history = self._entries.setdefault(key, [])
            history.append(entry)
            del history[: len(history) - self.max_history]
            self._entries.move_to_end(key)

            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Evicted cache key {evicted}")

    async def invalidate(self, query: SearchQuery, namespace: str | None = None) -> None:
        async with self._lock:
            self._entries.pop(self.key_for(query, namespace), None)

    async def cleanup(self) -> int:
        """Drop expired entries, and keys left with none. Returns the number of keys removed."""
        async with self._lock:
            now = self._clock()
            removed = 0
            for key in list(self._entries):
                valid = [entry for entry in self._entries[key] if not entry.is_expired(now)]
                if valid:
                    self._entries[key] = valid
                else:
                    del self._entries[key]
                    removed += 1
            return removed

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
