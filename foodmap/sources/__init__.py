"""
External place data sources.

Third-party APIs are rate-limited and billed per call, so every call here
sits behind the memory and durable tiers.
"""

from .base import PlaceSource
from .config import DEFAULT_PLACES_CONFIG, PlacesConfig
from .google_places import GooglePlacesSource

__all__ = [
    "DEFAULT_PLACES_CONFIG",
    "GooglePlacesSource",
    "PlaceSource",
    "PlacesConfig",
]
