"""
Per-attribute-kind wiring: which memory namespace and durable collection a
kind lives in, how stale its durable records may get, and how a stored or
fetched record is projected into the payload callers see.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from ..cache.registry import CacheNamespace
from ..store.base import Collection, Record
from .models import AttributeKind


def _rating(record: Record) -> dict[str, Any]:
    return {"rating": record.get("rating"), "reviews_count": record.get("reviews_count")}


def _reviews(record: Record) -> dict[str, Any]:
    return {
        "reviews": record.get("reviews") or [],
        "rating": record.get("rating"),
        "reviews_count": record.get("reviews_count"),
    }


def _photo(record: Record) -> dict[str, Any]:
    return {
        "photo_url": record.get("photo_url") or None,
        "is_closed": bool(record.get("is_closed", False)),
        "business_status": record.get("business_status"),
    }


def _price(record: Record) -> dict[str, Any]:
    return {
        "price_level": record.get("price_level"),
        "price_range": record.get("price_range"),
        "phone_number": record.get("phone_number"),
    }


def _always(payload: dict[str, Any]) -> bool:
    return True


def _open_with_photo(payload: dict[str, Any]) -> bool:
    return bool(payload.get("photo_url")) and not payload.get("is_closed")


@dataclass(frozen=True)
class KindSpec:
    namespace: CacheNamespace
    collection: Collection
    staleness_window: timedelta | None
    project: Callable[[Record], dict[str, Any]]
    cacheable: Callable[[dict[str, Any]], bool] = _always


KIND_SPECS: dict[AttributeKind, KindSpec] = {
    AttributeKind.rating: KindSpec(
        namespace=CacheNamespace.rating,
        collection=Collection.reviews,
        staleness_window=timedelta(hours=24),
        project=_rating,
    ),
    AttributeKind.reviews: KindSpec(
        namespace=CacheNamespace.review,
        collection=Collection.reviews,
        staleness_window=timedelta(hours=24),
        project=_reviews,
    ),
    AttributeKind.photo: KindSpec(
        namespace=CacheNamespace.photo,
        collection=Collection.images,
        staleness_window=timedelta(days=30),
        project=_photo,
        cacheable=_open_with_photo,
    ),
    AttributeKind.price: KindSpec(
        namespace=CacheNamespace.price,
        collection=Collection.prices,
        staleness_window=timedelta(days=7),
        project=_price,
    ),
}
