"""
Three-tier read path: memory cache -> durable store -> external source.

A lookup never raises because a dependency is down. Store and source
failures, and timeouts, are logged and treated as misses, so the worst case
is ``LookupResult(None, Tier.external)``. Successful external fetches are
written through to the durable store and the memory cache.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Generic, TypeVar

from ..cache.lru import BoundedTTLCache
from .models import LookupResult, Tier

logger = logging.getLogger(__name__)

V = TypeVar("V")

FetchFn = Callable[[str], Awaitable[Any]]
WriteFn = Callable[[str, Any], Awaitable[None]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _identity(value: Any) -> Any:
    return value


def _always(value: Any) -> bool:
    return True


def _as_aware(ts: datetime | str | None) -> datetime | None:
    if ts is None:
        return None
    if isinstance(ts, str):
        try:
            ts = datetime.fromisoformat(ts)
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class TieredLookup(Generic[V]):
    """Tier orchestration for one logical kind of lookup.

    Parameters
    ----------
    cache:
        Memory tier for this kind.
    staleness_window:
        Maximum age of a durable record's ``updated_at`` before it counts as
        a miss. ``None`` means durable records never go stale.
    timeout:
        Seconds allowed for each durable or external call.
    project:
        Maps a durable record or raw external result to the cached value.
    cacheable:
        Predicate on the projected value; values failing it are returned but
        not kept in memory.
    single_flight:
        When true, concurrent misses for the same key on one event loop share
        one resolution, so a cold key triggers a single external call there.
    """

    def __init__(
        self,
        cache: BoundedTTLCache[V],
        staleness_window: timedelta | None = None,
        timeout: float = 10.0,
        project: Callable[[Any], V] = _identity,
        cacheable: Callable[[V], bool] = _always,
        single_flight: bool = True,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cache = cache
        self.staleness_window = staleness_window
        self.timeout = timeout
        self.project = project
        self.cacheable = cacheable
        self.single_flight = single_flight
        self._now = now
        self._inflight: dict[tuple[asyncio.AbstractEventLoop, str], asyncio.Task[LookupResult[V]]] = {}

    async def lookup(
        self,
        key: str,
        fetch_durable: FetchFn,
        fetch_external: FetchFn,
        write_durable: WriteFn | None = None,
    ) -> LookupResult[V]:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Memory hit: %s", key)
            return LookupResult(cached, Tier.memory)

        if not self.single_flight:
            return await self._resolve(key, fetch_durable, fetch_external, write_durable)

        # Tasks can only be awaited from their own loop
        flight = (asyncio.get_running_loop(), key)
        task = self._inflight.get(flight)
        if task is None:
            task = asyncio.ensure_future(
                self._resolve(key, fetch_durable, fetch_external, write_durable)
            )
            self._inflight[flight] = task
            task.add_done_callback(lambda t, f=flight: self._forget(f, t))
        else:
            logger.debug("Joining in-flight lookup for %s", key)
        return await asyncio.shield(task)

    async def refresh(
        self,
        key: str,
        fetch_external: FetchFn,
        write_durable: WriteFn | None = None,
    ) -> LookupResult[V]:
        """Skip the memory and durable tiers and re-fetch from the source."""
        return await self._from_external(key, fetch_external, write_durable)

    def _forget(
        self, flight: tuple[asyncio.AbstractEventLoop, str], task: asyncio.Task[LookupResult[V]],
    ) -> None:
        if self._inflight.get(flight) is task:
            del self._inflight[flight]

    async def _resolve(
        self,
        key: str,
        fetch_durable: FetchFn,
        fetch_external: FetchFn,
        write_durable: WriteFn | None,
    ) -> LookupResult[V]:
        record = await self._call("durable store read", fetch_durable, key)
        if record is not None:
            if self._is_fresh(record):
                value = self.project(record)
                self._remember(key, value)
                return LookupResult(value, Tier.durable)
            logger.debug("Durable record for %s is stale", key)

        return await self._from_external(key, fetch_external, write_durable)

    async def _from_external(
        self,
        key: str,
        fetch_external: FetchFn,
        write_durable: WriteFn | None,
    ) -> LookupResult[V]:
        raw = await self._call("external source", fetch_external, key)
        if raw is None:
            return LookupResult(None, Tier.external)

        if write_durable is not None:
            await self._call("durable store write", write_durable, key, raw)

        value = self.project(raw)
        self._remember(key, value)
        return LookupResult(value, Tier.external)

    async def _call(self, what: str, fn: Callable[..., Awaitable[Any]], key: str, *args: Any) -> Any:
        try:
            return await asyncio.wait_for(fn(key, *args), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.1fs for %r", what, self.timeout, key)
        except Exception:
            logger.warning("%s failed for %r, treating as a miss", what, key, exc_info=True)
        return None

    def _is_fresh(self, record: Any) -> bool:
        if self.staleness_window is None:
            return True
        updated_at = _as_aware(record.get("updated_at")) if isinstance(record, dict) else None
        if updated_at is None:
            return False
        return self._now() - updated_at <= self.staleness_window

    def _remember(self, key: str, value: V) -> None:
        if value is not None and self.cacheable(value):
            self.cache.set(key, value)
