from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Protocol

Record = dict[str, Any]


class Collection(str, Enum):
    """Durable collections, keyed by restaurant name."""

    reviews = "reviews"
    images = "images"
    prices = "prices"


class DocumentStore(Protocol):
    """Persistent record store behind the memory tier.

    Every record carries ``restaurant_name``, ``created_at`` and
    ``updated_at`` (timezone-aware datetimes) next to its payload fields.
    """

    async def find_one(self, collection: Collection, key: str) -> Record | None:
        ...

    async def find_many(self, collection: Collection, keys: Iterable[str]) -> list[Record]:
        """Bulk ``IN``-style lookup; missing keys are simply absent."""
        ...

    async def upsert(self, collection: Collection, key: str, fields: Record) -> None:
        ...

    async def delete_one(self, collection: Collection, key: str) -> int:
        ...

    async def delete_many(self, collection: Collection) -> int:
        ...

    async def count(self, collection: Collection) -> int:
        ...

    async def oldest(self, collection: Collection) -> Record | None:
        ...

    async def newest(self, collection: Collection) -> Record | None:
        ...
