"""
Bounded in-memory cache with least-recently-used eviction and per-entry TTL.

Expiry is lazy: an entry past its deadline is only dropped when it is read.
There is no background sweeper. All operations run under one lock and never
suspend, so the cache can be shared by every coroutine in the process.
"""
from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")

DEFAULT_MAX_SIZE = 500
DEFAULT_TTL = 300.0  # 5 minutes


@dataclass
class CacheEntry(Generic[V]):
    value: V
    expires_at: float


class BoundedTTLCache(Generic[V]):
    """Fixed-capacity key/value cache.

    Parameters
    ----------
    max_size:
        Maximum number of live entries. Inserting into a full cache evicts
        the least recently used entry first.
    default_ttl:
        Time-to-live in seconds applied when ``set`` is called without one.
    clock:
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        default_ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if default_ttl <= 0:
            raise ValueError("default_ttl must be positive")
        self.max_size = max_size
        self.default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry[V]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> V | None:
        """Return the cached value, or ``None`` if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if self._clock() > entry.expires_at:
                del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def set(self, key: str, value: V, ttl: float | None = None) -> None:
        with self._lock:
            self._entries.pop(key, None)
            while len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache evicted LRU key %s", evicted)
            expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def invalidate_by_pattern(self, pattern: str) -> int:
        """Delete every key containing ``pattern`` as a plain substring."""
        with self._lock:
            doomed = [key for key in self._entries if pattern in key]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    @property
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size

    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = 0
            self._misses = 0
