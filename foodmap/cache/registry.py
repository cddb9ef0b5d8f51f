from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from .config import DEFAULT_CACHE_CONFIG, CacheConfig
from .lru import BoundedTTLCache

logger = logging.getLogger(__name__)


class CacheNamespace(str, Enum):
    rating = "rating"
    review = "review"
    photo = "photo"
    price = "price"
    nearby = "nearby"


class CacheRegistry:
    """The process's set of memory caches, one per namespace.

    Built once when the service starts and handed to every component that
    reads or invalidates cached data.
    """

    def __init__(self, config: CacheConfig = DEFAULT_CACHE_CONFIG) -> None:
        self._caches: dict[CacheNamespace, BoundedTTLCache[Any]] = {}
        for namespace in CacheNamespace:
            ns_config = getattr(config, namespace.value)
            self._caches[namespace] = BoundedTTLCache(
                max_size=ns_config.max_size, default_ttl=ns_config.ttl,
            )

    def __getitem__(self, namespace: CacheNamespace) -> BoundedTTLCache[Any]:
        return self._caches[namespace]

    def __iter__(self):
        return iter(self._caches.items())

    def clear_all(self) -> None:
        for cache in self._caches.values():
            cache.clear()
        logger.info("Cleared all memory cache namespaces")

    def invalidate_entity(self, name: str) -> int:
        """Drop every key mentioning ``name`` in any namespace.

        Matching is a plain substring test, so "Taipei" also hits
        "New Taipei".
        """
        removed = sum(cache.invalidate_by_pattern(name) for cache in self._caches.values())
        logger.info("Invalidated %d memory cache entries for %r", removed, name)
        return removed

    def stats(self) -> dict[str, dict[str, Any]]:
        return {namespace.value: cache.stats() for namespace, cache in self._caches.items()}
