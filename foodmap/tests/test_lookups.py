from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from conftest import reviews_payload

from foodmap.cache.registry import CacheNamespace
from foodmap.lookups.models import AttributeKind, Tier
from foodmap.store.base import Collection


@pytest.mark.asyncio
async def test_rating_lookup_goes_external_then_memory(engine, fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload(4.5, 900)

    first = await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    assert first.source is Tier.external
    assert first.value == {"rating": 4.5, "reviews_count": 900}

    second = await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    assert second.source is Tier.memory
    assert fake_source.calls == [("fetch_reviews", "Ay-Chung")]


@pytest.mark.asyncio
async def test_external_result_is_written_to_durable_store(engine, fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    await engine.lookups.lookup("Ay-Chung", AttributeKind.reviews)

    stored = await engine.store.find_one(Collection.reviews, "Ay-Chung")
    assert stored["rating"] == 4.5
    assert stored["restaurant_name"] == "Ay-Chung"
    assert "updated_at" in stored


@pytest.mark.asyncio
async def test_durable_tier_serves_after_memory_cleared(engine, fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    await engine.lookups.lookup("Ay-Chung", AttributeKind.reviews)
    engine.caches.clear_all()

    result = await engine.lookups.lookup("Ay-Chung", AttributeKind.reviews)
    assert result.source is Tier.durable
    assert result.value["reviews"][0]["author_name"] == "Lin"
    assert len(fake_source.calls) == 1


@pytest.mark.asyncio
async def test_rating_reads_the_shared_reviews_record(engine, fake_source):
    await engine.store.upsert(Collection.reviews, "Din Tai Fung", reviews_payload(4.7, 3000))
    result = await engine.lookups.lookup("Din Tai Fung", AttributeKind.rating)
    assert result.source is Tier.durable
    assert result.value == {"rating": 4.7, "reviews_count": 3000}
    assert fake_source.calls == []


@pytest.mark.asyncio
async def test_stale_price_record_refetched(engine, fake_source):
    await engine.store.upsert(Collection.prices, "Din Tai Fung", {"price_level": "PRICE_LEVEL_MODERATE"})
    record = engine.store._collections[Collection.prices]["Din Tai Fung"]
    record["updated_at"] = datetime.now(timezone.utc) - timedelta(days=8)
    fake_source.prices["Din Tai Fung"] = {"price_level": "PRICE_LEVEL_EXPENSIVE", "price_range": "NT$500~1,000"}

    result = await engine.lookups.lookup("Din Tai Fung", AttributeKind.price)
    assert result.source is Tier.external
    assert result.value["price_range"] == "NT$500~1,000"


@pytest.mark.asyncio
async def test_source_outage_yields_not_found(engine, fake_source):
    fake_source.fail.add("fetch_photo")
    result = await engine.lookups.lookup("Ay-Chung", AttributeKind.photo)
    assert result.value is None
    assert result.source is Tier.external


@pytest.mark.asyncio
async def test_closed_photo_not_cached(engine, fake_source):
    fake_source.photos["Gone"] = {"photo_url": "https://img/g", "is_closed": True, "business_status": "CLOSED_PERMANENTLY"}
    result = await engine.lookups.lookup("Gone", AttributeKind.photo)
    assert result.value["is_closed"] is True
    assert engine.caches[CacheNamespace.photo].get("Gone") is None


@pytest.mark.asyncio
async def test_lookup_events_recorded(engine, fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload()
    await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    events = engine.events.events()
    assert [e["source"] for e in events] == ["external", "memory"]
    assert all(e["type"] == "lookup" and e["found"] for e in events)


@pytest.mark.asyncio
async def test_refresh_overwrites_cached_value(engine, fake_source):
    engine.caches[CacheNamespace.review].set("Ay-Chung", {"reviews": [], "rating": 1.0, "reviews_count": 1})
    fake_source.reviews["Ay-Chung"] = reviews_payload(4.9, 10)
    result = await engine.lookups.refresh("Ay-Chung", AttributeKind.reviews)
    assert result.source is Tier.external
    assert engine.caches[CacheNamespace.review].get("Ay-Chung")["rating"] == 4.9


@pytest.mark.asyncio
async def test_refreshing_reviews_drops_stale_rating(engine, fake_source):
    fake_source.reviews["Ay-Chung"] = reviews_payload(4.0, 100)
    await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    assert engine.caches[CacheNamespace.rating].get("Ay-Chung") == {"rating": 4.0, "reviews_count": 100}

    fake_source.reviews["Ay-Chung"] = reviews_payload(4.6, 140)
    await engine.lookups.refresh("Ay-Chung", AttributeKind.reviews)
    assert engine.caches[CacheNamespace.rating].get("Ay-Chung") is None

    result = await engine.lookups.lookup("Ay-Chung", AttributeKind.rating)
    assert result.source is Tier.durable
    assert result.value == {"rating": 4.6, "reviews_count": 140}


@pytest.mark.asyncio
async def test_failed_refresh_keeps_sibling_cache(engine, fake_source):
    engine.caches[CacheNamespace.rating].set("Ay-Chung", {"rating": 4.0, "reviews_count": 100})
    fake_source.fail.add("fetch_reviews")
    await engine.lookups.refresh("Ay-Chung", AttributeKind.reviews)
    assert engine.caches[CacheNamespace.rating].get("Ay-Chung") is not None
