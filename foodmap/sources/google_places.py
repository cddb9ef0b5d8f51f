from __future__ import annotations

import logging
from typing import Any

import httpx

from ..cache.lru import BoundedTTLCache
from ..errors import SourceError
from ..geo.models import GeoPoint, ProximityCandidate
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig

logger = logging.getLogger(__name__)

_OK_STATUSES = {"OK", "ZERO_RESULTS"}

PRICE_LEVEL_RANGES = {
    "PRICE_LEVEL_FREE": "Free",
    "PRICE_LEVEL_INEXPENSIVE": "Under NT$200",
    "PRICE_LEVEL_MODERATE": "NT$200~500",
    "PRICE_LEVEL_EXPENSIVE": "NT$500~1,000",
    "PRICE_LEVEL_VERY_EXPENSIVE": "Over NT$1,000",
}


def _format_price_range(price_range: dict[str, Any] | None) -> str | None:
    if not price_range:
        return None
    start = (price_range.get("startPrice") or {}).get("units")
    end = (price_range.get("endPrice") or {}).get("units")
    if start and end:
        return f"NT${int(start):,}~{int(end):,}"
    if start:
        return f"NT${int(start):,}~"
    if end:
        return f"~NT${int(end):,}"
    return None


class GooglePlacesSource:
    """``PlaceSource`` backed by the Google Places web APIs.

    A fresh ``httpx.AsyncClient`` is opened per call so the source can be
    shared across event loops. Pass ``transport`` to stub the network.
    """

    def __init__(
        self,
        config: PlacesConfig = DEFAULT_PLACES_CONFIG,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport
        self._place_ids: BoundedTTLCache[str] = BoundedTTLCache(
            max_size=config.place_id_cache_size, default_ttl=config.place_id_cache_ttl,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)

    def _require_key(self) -> str:
        if not self.config.api_key:
            raise SourceError("Google Places API key not configured")
        return self.config.api_key

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        params = {**params, "key": self._require_key()}
        try:
            async with self._client() as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceError(f"Places request failed: {e}") from e

        status = data.get("status", "OK")
        if status not in _OK_STATUSES:
            raise SourceError(f"Places API status {status}: {data.get('error_message', '')}")
        return data

    async def _find_place(self, name: str, fields: str = "place_id") -> dict[str, Any] | None:
        data = await self._get_json(
            f"{self.config.base_url}/findplacefromtext/json",
            {
                "input": f"{name} {self.config.region_hint}",
                "inputtype": "textquery",
                "fields": fields,
            },
        )
        candidates = data.get("candidates") or []
        if not candidates:
            return None
        first = candidates[0]
        if first.get("place_id"):
            self._place_ids.set(name, first["place_id"])
        return first

    async def _place_id(self, name: str) -> str | None:
        cached = self._place_ids.get(name)
        if cached is not None:
            return cached
        found = await self._find_place(name)
        return found.get("place_id") if found else None

    async def fetch_reviews(self, name: str) -> dict[str, Any] | None:
        place_id = await self._place_id(name)
        if not place_id:
            return None

        data = await self._get_json(
            f"{self.config.base_url}/details/json",
            {
                "place_id": place_id,
                "fields": "reviews,rating,user_ratings_total",
                "language": self.config.language,
                "reviews_sort": "newest",
            },
        )
        result = data.get("result") or {}
        reviews = sorted(result.get("reviews") or [], key=lambda r: r.get("time", 0), reverse=True)
        return {
            "place_id": place_id,
            "rating": result.get("rating"),
            "reviews_count": result.get("user_ratings_total"),
            "reviews": reviews,
        }

    async def fetch_photo(self, name: str) -> dict[str, Any] | None:
        found = await self._find_place(name, fields="place_id,photos,business_status")
        if not found:
            return None

        photos = found.get("photos") or []
        photo_url = None
        if photos:
            photo_url = (
                f"{self.config.base_url}/photo?maxwidth={self.config.photo_max_width}"
                f"&photo_reference={photos[0]['photo_reference']}"
            )
        status = found.get("business_status")
        return {
            "place_id": found.get("place_id"),
            "photo_url": photo_url,
            "is_closed": status == "CLOSED_PERMANENTLY",
            "business_status": status,
        }

    async def fetch_price(self, name: str) -> dict[str, Any] | None:
        headers = {
            "X-Goog-Api-Key": self._require_key(),
            "X-Goog-FieldMask": (
                "places.id,places.priceLevel,places.priceRange,"
                "places.nationalPhoneNumber,places.internationalPhoneNumber"
            ),
        }
        body = {"textQuery": f"{name} {self.config.region_hint}", "languageCode": self.config.language}
        try:
            async with self._client() as client:
                resp = await client.post(self.config.text_search_url, json=body, headers=headers)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SourceError(f"Places text search failed: {e}") from e

        places = data.get("places") or []
        if not places:
            return None
        first = places[0]
        price_level = first.get("priceLevel")
        return {
            "place_id": first.get("id"),
            "price_level": price_level,
            "price_range": _format_price_range(first.get("priceRange"))
            or PRICE_LEVEL_RANGES.get(price_level or ""),
            "phone_number": first.get("nationalPhoneNumber") or first.get("internationalPhoneNumber"),
        }

    async def fetch_nearby(
        self, origin: GeoPoint, radius_meters: float, category: str | None = None,
    ) -> list[ProximityCandidate]:
        params: dict[str, Any] = {
            "location": f"{origin.lat},{origin.lng}",
            "radius": int(radius_meters),
            "type": "restaurant",
            "language": self.config.language,
        }
        if category:
            params["keyword"] = category
        data = await self._get_json(f"{self.config.base_url}/nearbysearch/json", params)

        out: list[ProximityCandidate] = []
        for place in data.get("results") or []:
            location = (place.get("geometry") or {}).get("location") or {}
            if "lat" not in location or "lng" not in location:
                continue
            out.append(ProximityCandidate(
                id=place.get("place_id", ""),
                point=GeoPoint(lat=float(location["lat"]), lng=float(location["lng"])),
                payload={
                    "name": place.get("name"),
                    "address": place.get("vicinity"),
                    "rating": place.get("rating"),
                    "review_count": place.get("user_ratings_total"),
                    "open_now": (place.get("opening_hours") or {}).get("open_now"),
                },
            ))
        logger.debug("Nearby search returned %d places", len(out))
        return out
