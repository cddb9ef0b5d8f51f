"""
In-process memory caches.

- ``BoundedTTLCache``: LRU + TTL key/value store shared across requests.
- ``CacheRegistry``: one cache per namespace (rating, review, photo, price,
  nearby), constructed at startup and passed by reference.
"""

from .config import DEFAULT_CACHE_CONFIG, CacheConfig, NamespaceConfig
from .lru import BoundedTTLCache
from .registry import CacheNamespace, CacheRegistry

__all__ = [
    "BoundedTTLCache",
    "CacheConfig",
    "CacheNamespace",
    "CacheRegistry",
    "DEFAULT_CACHE_CONFIG",
    "NamespaceConfig",
]
