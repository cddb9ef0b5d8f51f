from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class PlacesConfig:
    api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")
    base_url: str = "https://maps.googleapis.com/maps/api/place"
    text_search_url: str = "https://places.googleapis.com/v1/places:searchText"
    region_hint: str = "Taipei Taiwan"
    language: str = os.getenv("FOODMAP_PLACES_LANGUAGE", "en")
    timeout: float = float(os.getenv("FOODMAP_PLACES_TIMEOUT", "8.0"))
    photo_max_width: int = 400
    place_id_cache_size: int = 1000
    place_id_cache_ttl: float = 24 * 60 * 60


DEFAULT_PLACES_CONFIG = PlacesConfig()
