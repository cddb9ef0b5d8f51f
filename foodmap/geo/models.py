from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field

from ..errors import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def validate(self) -> None:
        """Raise ``ValidationError`` unless lat is in [-90, 90] and lng in [-180, 180]."""
        if not (math.isfinite(self.lat) and -90.0 <= self.lat <= 90.0):
            raise ValidationError(f"Latitude out of range: {self.lat}")
        if not (math.isfinite(self.lng) and -180.0 <= self.lng <= 180.0):
            raise ValidationError(f"Longitude out of range: {self.lng}")


@dataclass(frozen=True)
class ProximityCandidate:
    id: str
    point: GeoPoint | None
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProximityResult:
    candidate: ProximityCandidate
    distance_meters: float
    distance_km: float
    formatted_distance: str
    within_radius: bool

    def to_dict(self) -> dict[str, Any]:
        point = self.candidate.point
        return {
            "id": self.candidate.id,
            "lat": point.lat if point else None,
            "lng": point.lng if point else None,
            **self.candidate.payload,
            "distance_meters": self.distance_meters,
            "distance_km": self.distance_km,
            "formatted_distance": self.formatted_distance,
            "within_radius": self.within_radius,
        }


class NearbyRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    radius_meters: float = Field(default=2000.0, ge=0.0, description="Clamped to 50 km")
    limit: int = Field(default=5, ge=1, le=50)
    category: str | None = Field(default=None, description="Catalog category or live-search keyword")
    live: bool = Field(default=False, description="Search the external source instead of the catalog")


class NearbyResponse(BaseModel):
    success: bool = True
    results: list[dict[str, Any]]
    total: int
    user_location: dict[str, float]
