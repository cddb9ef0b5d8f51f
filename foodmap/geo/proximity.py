"""
Nearest-N-within-radius over plain point lists.

No spatial index: every candidate's great-circle distance is computed in one
vectorised Haversine pass, then filtered, stably sorted and truncated. Point
sets here are a few hundred places at most, so a linear scan is cheap.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from ..errors import ValidationError
from .models import GeoPoint, ProximityCandidate, ProximityResult

EARTH_RADIUS_METERS = 6_371_000.0
MAX_RADIUS_METERS = 50_000.0
DEFAULT_LIMIT = 5


def haversine_meters(origin: GeoPoint, lats: np.ndarray, lngs: np.ndarray) -> np.ndarray:
    """Great-circle distance in metres from ``origin`` to each (lat, lng)."""
    lat1 = np.radians(origin.lat)
    lat2 = np.radians(lats)
    d_lat = lat2 - lat1
    d_lng = np.radians(lngs) - np.radians(origin.lng)

    a = np.sin(d_lat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(d_lng / 2) ** 2
    a = np.clip(a, 0.0, 1.0)
    return 2 * EARTH_RADIUS_METERS * np.arctan2(np.sqrt(a), np.sqrt(1 - a))


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    return float(haversine_meters(a, np.array([b.lat]), np.array([b.lng]))[0])


def format_distance(meters: float) -> str:
    """``"150m"`` below one kilometre, ``"1.2km"`` from there on."""
    if meters < 1000:
        return f"{round(meters)}m"
    return f"{meters / 1000:.1f}km"


def clamp_radius(radius_meters: float) -> float:
    if radius_meters < 0:
        raise ValidationError("radius_meters must not be negative")
    return min(float(radius_meters), MAX_RADIUS_METERS)


def rank_by_distance(
    origin: GeoPoint,
    candidates: Sequence[ProximityCandidate],
    radius_meters: float | None = None,
) -> list[ProximityResult]:
    """Every candidate with coordinates, nearest first.

    Equal distances keep their input order. ``within_radius`` is flagged
    against ``radius_meters`` when one is given, else always true.
    """
    origin.validate()
    located = [c for c in candidates if c.point is not None]
    if not located:
        return []

    lats = np.array([c.point.lat for c in located], dtype=float)
    lngs = np.array([c.point.lng for c in located], dtype=float)
    meters = haversine_meters(origin, lats, lngs)
    order = np.argsort(meters, kind="stable")

    results: list[ProximityResult] = []
    for idx in order:
        m = float(meters[idx])
        results.append(ProximityResult(
            candidate=located[idx],
            distance_meters=round(m, 3),
            distance_km=round(m / 1000, 3),
            formatted_distance=format_distance(m),
            within_radius=radius_meters is None or m <= radius_meters,
        ))
    return results


def nearest(
    origin: GeoPoint,
    candidates: Sequence[ProximityCandidate],
    radius_meters: float,
    limit: int = DEFAULT_LIMIT,
) -> list[ProximityResult]:
    """Up to ``limit`` candidates within ``radius_meters`` of ``origin``."""
    origin.validate()
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    radius = clamp_radius(radius_meters)

    ranked = rank_by_distance(origin, candidates, radius)
    return [r for r in ranked if r.within_radius][:limit]
