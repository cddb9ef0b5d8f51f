"""
Geo-proximity engine.

Haversine distances over plain candidate lists: radius filter, stable
nearest-first ordering, limit, and human-readable distance strings.
"""

from .models import GeoPoint, ProximityCandidate, ProximityResult
from .proximity import (
    EARTH_RADIUS_METERS,
    MAX_RADIUS_METERS,
    distance_meters,
    format_distance,
    haversine_meters,
    nearest,
    rank_by_distance,
)

__all__ = [
    "EARTH_RADIUS_METERS",
    "MAX_RADIUS_METERS",
    "GeoPoint",
    "ProximityCandidate",
    "ProximityResult",
    "distance_meters",
    "format_distance",
    "haversine_meters",
    "nearest",
    "rank_by_distance",
]
