from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Callable, Iterable

from .base import Collection, Record


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDocumentStore:
    """Dict-backed ``DocumentStore`` for single-process deployments and tests.

    Records are deep-copied in and out so callers never share mutable state
    with the store. No method awaits mid-operation, so each call is atomic
    with respect to other coroutines on the loop.
    """

    def __init__(self, now: Callable[[], datetime] = _utcnow) -> None:
        self._now = now
        self._collections: dict[Collection, dict[str, Record]] = {c: {} for c in Collection}

    async def find_one(self, collection: Collection, key: str) -> Record | None:
        record = self._collections[collection].get(key)
        return copy.deepcopy(record) if record is not None else None

    async def find_many(self, collection: Collection, keys: Iterable[str]) -> list[Record]:
        docs = self._collections[collection]
        return [copy.deepcopy(docs[k]) for k in dict.fromkeys(keys) if k in docs]

    async def upsert(self, collection: Collection, key: str, fields: Record) -> None:
        now = self._now()
        existing = self._collections[collection].get(key)
        record = dict(existing) if existing else {"created_at": now}
        record.update(copy.deepcopy(fields))
        record["restaurant_name"] = key
        record["updated_at"] = now
        self._collections[collection][key] = record

    async def delete_one(self, collection: Collection, key: str) -> int:
        return 1 if self._collections[collection].pop(key, None) is not None else 0

    async def delete_many(self, collection: Collection) -> int:
        deleted = len(self._collections[collection])
        self._collections[collection].clear()
        return deleted

    async def count(self, collection: Collection) -> int:
        return len(self._collections[collection])

    async def oldest(self, collection: Collection) -> Record | None:
        return await self._extreme(collection, newest=False)

    async def newest(self, collection: Collection) -> Record | None:
        return await self._extreme(collection, newest=True)

    async def _extreme(self, collection: Collection, newest: bool) -> Record | None:
        docs = list(self._collections[collection].values())
        if not docs:
            return None
        pick = max if newest else min
        doc = pick(docs, key=lambda d: d["updated_at"])
        return {"restaurant_name": doc["restaurant_name"], "updated_at": doc["updated_at"]}
