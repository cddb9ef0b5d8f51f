from __future__ import annotations

from typing import Any, Protocol

from ..geo.models import GeoPoint, ProximityCandidate


class PlaceSource(Protocol):
    """Third-party place data, one capability per attribute kind.

    Each call may raise ``SourceError`` (network, rate limit, missing key).
    ``None`` means the place was not found.
    """

    async def fetch_reviews(self, name: str) -> dict[str, Any] | None:
        """``{place_id, rating, reviews_count, reviews}``."""
        ...

    async def fetch_photo(self, name: str) -> dict[str, Any] | None:
        """``{place_id, photo_url, is_closed, business_status}``."""
        ...

    async def fetch_price(self, name: str) -> dict[str, Any] | None:
        """``{place_id, price_level, price_range, phone_number}``."""
        ...

    async def fetch_nearby(
        self, origin: GeoPoint, radius_meters: float, category: str | None = None,
    ) -> list[ProximityCandidate]:
        ...
