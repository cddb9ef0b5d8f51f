from __future__ import annotations

import asyncio
from typing import Any

import pytest

from foodmap.app import app
from foodmap.auth.users import AuthConfig
from foodmap.engine import build_engine
from foodmap.geo.models import GeoPoint, ProximityCandidate
from foodmap.lookups.config import LookupConfig

ADMIN_KEY = "test-admin-key"


class FakeSource:
    """In-process ``PlaceSource`` that records every call."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls: list[tuple[str, str]] = []
        self.fail: set[str] = set()
        self.reviews: dict[str, dict[str, Any]] = {}
        self.photos: dict[str, dict[str, Any]] = {}
        self.prices: dict[str, dict[str, Any]] = {}
        self.places: list[ProximityCandidate] = []

    async def _answer(self, method: str, name: str, table: dict[str, dict[str, Any]]):
        self.calls.append((method, name))
        if self.delay:
            await asyncio.sleep(self.delay)
        if method in self.fail:
            raise RuntimeError(f"{method} is down")
        return table.get(name)

    async def fetch_reviews(self, name: str):
        return await self._answer("fetch_reviews", name, self.reviews)

    async def fetch_photo(self, name: str):
        return await self._answer("fetch_photo", name, self.photos)

    async def fetch_price(self, name: str):
        return await self._answer("fetch_price", name, self.prices)

    async def fetch_nearby(self, origin: GeoPoint, radius_meters: float, category: str | None = None):
        self.calls.append(("fetch_nearby", f"{origin.lat},{origin.lng}"))
        if "fetch_nearby" in self.fail:
            raise RuntimeError("fetch_nearby is down")
        return list(self.places)


def reviews_payload(rating: float = 4.5, count: int = 120) -> dict[str, Any]:
    return {
        "place_id": "place-1",
        "rating": rating,
        "reviews_count": count,
        "reviews": [{"author_name": "Lin", "rating": 5, "text": "Great", "time": 1700000000}],
    }


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture(autouse=True)
def engine(fake_source):
    """Fresh engine for the app, with the fake source and a known admin key."""
    app.state.engine = build_engine(
        source=fake_source,
        lookup_config=LookupConfig(timeout=1.0, refresh_delay=0.0),
        auth_config=AuthConfig(admin_key=ADMIN_KEY, session_secret="test"),
    )
    return app.state.engine
