from __future__ import annotations

import asyncio
import logging
import time

from ..analytics.store import EventLog
from ..cache.registry import CacheNamespace, CacheRegistry
from ..sources.base import PlaceSource
from ..store.catalog import RestaurantCatalog
from .models import GeoPoint, ProximityCandidate, ProximityResult
from .proximity import DEFAULT_LIMIT, clamp_radius, nearest

logger = logging.getLogger(__name__)


def nearby_cache_key(origin: GeoPoint, radius_meters: float, category: str | None) -> str:
    # 0.001 degrees is roughly 100 m, so nearby origins share an entry
    return f"{round(origin.lat, 3)}:{round(origin.lng, 3)}:{int(radius_meters)}:{category or '*'}"


class NearbyService:
    """Nearest restaurants around a point, from the catalog or a live search."""

    def __init__(
        self,
        catalog: RestaurantCatalog,
        source: PlaceSource,
        caches: CacheRegistry,
        timeout: float = 10.0,
        events: EventLog | None = None,
    ) -> None:
        self.catalog = catalog
        self.source = source
        self.cache = caches[CacheNamespace.nearby]
        self.timeout = timeout
        self.events = events

    async def nearby(
        self,
        origin: GeoPoint,
        radius_meters: float,
        limit: int = DEFAULT_LIMIT,
        category: str | None = None,
        live: bool = False,
    ) -> list[ProximityResult]:
        start_time = time.time()
        origin.validate()
        radius = clamp_radius(radius_meters)

        if live:
            candidates = await self._live_candidates(origin, radius, category)
        else:
            candidates = self.catalog.candidates(category)

        results = nearest(origin, candidates, radius, limit)

        if self.events is not None:
            self.events.record("nearby", {
                "live": live,
                "category": category,
                "radius_meters": radius,
                "results_returned": len(results),
                "response_time_ms": round((time.time() - start_time) * 1000, 1),
            })
        return results

    async def _live_candidates(
        self, origin: GeoPoint, radius: float, category: str | None,
    ) -> list[ProximityCandidate]:
        key = nearby_cache_key(origin, radius, category)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            candidates = await asyncio.wait_for(
                self.source.fetch_nearby(origin, radius, category), timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Live nearby search timed out after %.1fs", self.timeout)
            return []
        except Exception:
            logger.warning("Live nearby search failed, returning no candidates", exc_info=True)
            return []

        self.cache.set(key, candidates)
        return candidates
