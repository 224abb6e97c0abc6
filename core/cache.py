"""
Query Result Cache

Bounded, time-limited cache for read-only query results. Owned by the
component that executes the queries; there is no module-level instance.

Entries expire `ttl_seconds` after they were stored. When the cache is full,
inserting a new entry evicts the oldest insert; reads never change the
eviction order.
"""

import json
import time
from typing import Any, Callable, Optional, Sequence

from cachetools import FIFOCache

from core.logging import get_logger


class QueryCache:
    """
    TTL + max-size cache keyed by (query, params).

    Example:
        cache = QueryCache(ttl_seconds=300, max_entries=100)
        rows = cache.get(sql, params)
        if rows is None:
            rows = run(sql, params)
            cache.set(sql, params, rows)
    """

    DEFAULT_TTL = 300  # 5 minutes
    MAX_ENTRIES = 100

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL,
        max_entries: int = MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.timer = timer
        # key -> (stored_at, value)
        self._cache: FIFOCache = FIFOCache(maxsize=max_entries)
        self._metrics = {"hits": 0, "misses": 0}
        self.log = get_logger("query_cache")

    @staticmethod
    def make_key(query: str, params: Sequence[Any] = ()) -> str:
        """Build the cache key for a query and its bound parameters."""
        return f"{query}:{json.dumps(list(params), default=str)}"

    def _is_expired(self, stored_at: float) -> bool:
        return self.timer() - stored_at > self.ttl_seconds

    def _lookup(self, key: str) -> Optional[Any]:
        entry = self._cache.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._is_expired(stored_at):
            del self._cache[key]
            return None
        return value

    def get(self, query: str, params: Sequence[Any] = ()) -> Optional[Any]:
        """Return the cached result, or None if missing or expired."""
        key = self.make_key(query, params)
        value = self._lookup(key)
        if value is None:
            self._metrics["misses"] += 1
            return None

        self._metrics["hits"] += 1
        self.log.debug("query_cache_hit", key_length=len(key))
        return value

    def set(self, query: str, params: Sequence[Any], value: Any) -> None:
        """Store a query result, evicting the oldest insert when full."""
        self._cache[self.make_key(query, params)] = (self.timer(), value)

    def expire(self) -> None:
        """Drop every entry past its TTL."""
        for key in [k for k, (stored_at, _) in self._cache.items() if self._is_expired(stored_at)]:
            del self._cache[key]

    def clear(self) -> None:
        """Drop every cached result."""
        self._cache.clear()
        self.log.info("query_cache_cleared")

    def __len__(self) -> int:
        self.expire()
        return len(self._cache)

    def __contains__(self, key: str) -> bool:
        return self._lookup(key) is not None

    @property
    def metrics(self) -> dict:
        return {**self._metrics, "size": len(self)}
