"""
Batch reads for many restaurants at once.

One pipeline per requested attribute kind, all running concurrently. Each
pipeline splits the names into memory hits and misses, then resolves every
miss with a single bulk durable query. A pipeline that fails contributes
nothing and leaves the others untouched.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Iterable

from ..analytics.store import EventLog
from ..cache.registry import CacheRegistry
from ..errors import ValidationError
from ..store.base import DocumentStore
from .config import DEFAULT_LOOKUP_CONFIG, LookupConfig
from .kinds import KIND_SPECS
from .models import AttributeKind

logger = logging.getLogger(__name__)

BatchResult = dict[str, dict[AttributeKind, dict[str, Any]]]


class BatchAggregator:
    def __init__(
        self,
        caches: CacheRegistry,
        store: DocumentStore,
        config: LookupConfig = DEFAULT_LOOKUP_CONFIG,
        events: EventLog | None = None,
    ) -> None:
        self.caches = caches
        self.store = store
        self.timeout = config.timeout
        self.max_entities = config.max_batch_entities
        self.events = events

    async def aggregate(
        self,
        entity_keys: Iterable[str],
        attribute_kinds: Iterable[AttributeKind | str],
    ) -> BatchResult:
        start_time = time.time()
        names = list(dict.fromkeys(entity_keys))[: self.max_entities]
        if not names:
            raise ValidationError("At least one restaurant name is required")
        try:
            kinds = list(dict.fromkeys(AttributeKind(k) for k in attribute_kinds))
        except ValueError as e:
            raise ValidationError(str(e)) from e
        if not kinds:
            raise ValidationError("At least one attribute kind is required")

        # Every requested name appears, even if nothing is found for it
        results: BatchResult = {name: {} for name in names}

        await asyncio.gather(*(self._pipeline(kind, names, results) for kind in kinds))

        if self.events is not None:
            self.events.record("batch", {
                "restaurants": names,
                "kinds": [k.value for k in kinds],
                "response_time_ms": round((time.time() - start_time) * 1000, 1),
            })
        return results

    async def _pipeline(self, kind: AttributeKind, names: list[str], results: BatchResult) -> None:
        spec = KIND_SPECS[kind]
        cache = self.caches[spec.namespace]

        misses: list[str] = []
        for name in names:
            cached = cache.get(name)
            if cached is not None:
                results[name][kind] = cached
            else:
                misses.append(name)

        if not misses:
            return

        try:
            records = await asyncio.wait_for(
                self.store.find_many(spec.collection, misses), timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Bulk %s lookup timed out for %d names", kind.value, len(misses))
            return
        except Exception:
            logger.warning("Bulk %s lookup failed, omitting it from the batch", kind.value, exc_info=True)
            return

        wanted = set(misses)
        for record in records:
            name = record.get("restaurant_name")
            if name not in wanted:
                continue
            payload = spec.project(record)
            results[name][kind] = payload
            if spec.cacheable(payload):
                cache.set(name, payload)
