from __future__ import annotations

import time
from typing import Any, Awaitable, Callable

from ..analytics.store import EventLog
from ..cache.registry import CacheRegistry
from ..sources.base import PlaceSource
from ..store.base import DocumentStore
from .config import DEFAULT_LOOKUP_CONFIG, LookupConfig
from .kinds import KIND_SPECS
from .models import AttributeKind, LookupResult
from .orchestrator import TieredLookup


class AttributeLookupService:
    """Single-restaurant lookups, one ``TieredLookup`` per attribute kind."""

    def __init__(
        self,
        caches: CacheRegistry,
        store: DocumentStore,
        source: PlaceSource,
        config: LookupConfig = DEFAULT_LOOKUP_CONFIG,
        events: EventLog | None = None,
    ) -> None:
        self.caches = caches
        self.store = store
        self.source = source
        self.events = events
        self._tiers: dict[AttributeKind, TieredLookup[dict[str, Any]]] = {
            kind: TieredLookup(
                caches[spec.namespace],
                staleness_window=spec.staleness_window,
                timeout=config.timeout,
                project=spec.project,
                cacheable=spec.cacheable,
                single_flight=config.single_flight,
            )
            for kind, spec in KIND_SPECS.items()
        }

    def _external(self, kind: AttributeKind) -> Callable[[str], Awaitable[dict[str, Any] | None]]:
        if kind in (AttributeKind.rating, AttributeKind.reviews):
            return self.source.fetch_reviews
        if kind is AttributeKind.photo:
            return self.source.fetch_photo
        return self.source.fetch_price

    def _durable_read(self, kind: AttributeKind):
        collection = KIND_SPECS[kind].collection

        async def read(name: str):
            return await self.store.find_one(collection, name)

        return read

    def _durable_write(self, kind: AttributeKind):
        collection = KIND_SPECS[kind].collection

        async def write(name: str, fields: dict[str, Any]) -> None:
            await self.store.upsert(collection, name, fields)

        return write

    async def lookup(self, name: str, kind: AttributeKind) -> LookupResult[dict[str, Any]]:
        start_time = time.time()
        result = await self._tiers[kind].lookup(
            name,
            self._durable_read(kind),
            self._external(kind),
            self._durable_write(kind),
        )
        self._record("lookup", name, kind, result, start_time)
        return result

    async def refresh(self, name: str, kind: AttributeKind) -> LookupResult[dict[str, Any]]:
        """Force a re-fetch from the external source and write it through."""
        start_time = time.time()
        result = await self._tiers[kind].refresh(
            name, self._external(kind), self._durable_write(kind),
        )
        if result.found:
            self._drop_siblings(name, kind)
        self._record("refresh", name, kind, result, start_time)
        return result

    def _drop_siblings(self, name: str, kind: AttributeKind) -> None:
        # Other kinds projected from the rewritten record hold stale copies
        collection = KIND_SPECS[kind].collection
        for other, spec in KIND_SPECS.items():
            if other is not kind and spec.collection is collection:
                self.caches[spec.namespace].delete(name)

    def _record(
        self,
        event_type: str,
        name: str,
        kind: AttributeKind,
        result: LookupResult[Any],
        start_time: float,
    ) -> None:
        if self.events is None:
            return
        self.events.record(event_type, {
            "name": name,
            "kind": kind.value,
            "source": result.source.value,
            "found": result.found,
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })
