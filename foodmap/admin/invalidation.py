"""
Administrative cache invalidation.

Memory caches can be cleared wholesale or per restaurant; durable
collections can be emptied or have one restaurant's record deleted, forcing
the next lookup to re-fetch from the external source. Every operation checks
the caller's admin credential before touching anything.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from ..auth.users import AdminAuthorizer, AdminCredential
from ..cache.registry import CacheNamespace, CacheRegistry
from ..errors import AuthorizationError, ValidationError
from ..store.base import Collection, DocumentStore

logger = logging.getLogger(__name__)


class InvalidationScope(str, Enum):
    all = "all"
    reviews = "reviews"
    images = "images"
    prices = "prices"


# Durable collection and the memory namespaces fed from it
_SCOPE_TARGETS: dict[InvalidationScope, tuple[Collection, tuple[CacheNamespace, ...]]] = {
    InvalidationScope.reviews: (Collection.reviews, (CacheNamespace.rating, CacheNamespace.review)),
    InvalidationScope.images: (Collection.images, (CacheNamespace.photo,)),
    InvalidationScope.prices: (Collection.prices, (CacheNamespace.price,)),
}


class InvalidationController:
    def __init__(self, caches: CacheRegistry, store: DocumentStore, authorizer: AdminAuthorizer) -> None:
        self.caches = caches
        self.store = store
        self.authorizer = authorizer

    def _authorize(self, credential: AdminCredential) -> None:
        if not self.authorizer.is_admin(credential):
            raise AuthorizationError(anonymous=credential.is_empty)

    def invalidate_all(self, credential: AdminCredential) -> None:
        """Clear every memory cache namespace. Idempotent."""
        self._authorize(credential)
        self.caches.clear_all()

    def invalidate_entity(self, credential: AdminCredential, name: str) -> int:
        """Drop a restaurant's keys from every memory namespace."""
        self._authorize(credential)
        if not name:
            raise ValidationError("name is required when type is 'restaurant'")
        return self.caches.invalidate_entity(name)

    async def invalidate_by_type(
        self,
        credential: AdminCredential,
        scope: InvalidationScope,
        entity_name: str | None = None,
    ) -> dict[str, int]:
        """Delete durable records (one restaurant or whole collections).

        Returns the number of documents deleted per collection. The matching
        memory namespaces are dropped too so stale copies are not served.
        """
        self._authorize(credential)
        scopes = list(_SCOPE_TARGETS) if scope is InvalidationScope.all else [scope]

        deleted: dict[str, int] = {}
        for s in scopes:
            collection, namespaces = _SCOPE_TARGETS[s]
            if entity_name:
                deleted[s.value] = await self.store.delete_one(collection, entity_name)
                for ns in namespaces:
                    self.caches[ns].delete(entity_name)
            else:
                deleted[s.value] = await self.store.delete_many(collection)
                for ns in namespaces:
                    self.caches[ns].clear()

        logger.info(
            "Invalidated durable cache scope=%s name=%s deleted=%s",
            scope.value, entity_name or "all", deleted,
        )
        return deleted

    async def status(self, credential: AdminCredential) -> dict[str, Any]:
        """Document counts per collection plus the oldest and newest review."""
        self._authorize(credential)
        return {
            "reviews": {
                "count": await self.store.count(Collection.reviews),
                "oldest": await self.store.oldest(Collection.reviews),
                "newest": await self.store.newest(Collection.reviews),
            },
            "images": {"count": await self.store.count(Collection.images)},
            "prices": {"count": await self.store.count(Collection.prices)},
        }
