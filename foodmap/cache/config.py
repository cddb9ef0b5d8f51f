from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


@dataclass(frozen=True)
class NamespaceConfig:
    max_size: int
    ttl: float  # seconds


@dataclass(frozen=True)
class CacheConfig:
    """Capacity and TTL for each in-process cache namespace."""

    rating: NamespaceConfig = NamespaceConfig(
        _env_int("FOODMAP_CACHE_RATING_SIZE", 1000),
        _env_float("FOODMAP_CACHE_RATING_TTL", 5 * 60),
    )
    review: NamespaceConfig = NamespaceConfig(
        _env_int("FOODMAP_CACHE_REVIEW_SIZE", 500),
        _env_float("FOODMAP_CACHE_REVIEW_TTL", 60 * 60),
    )
    photo: NamespaceConfig = NamespaceConfig(
        _env_int("FOODMAP_CACHE_PHOTO_SIZE", 500),
        _env_float("FOODMAP_CACHE_PHOTO_TTL", 24 * 60 * 60),
    )
    price: NamespaceConfig = NamespaceConfig(
        _env_int("FOODMAP_CACHE_PRICE_SIZE", 500),
        _env_float("FOODMAP_CACHE_PRICE_TTL", 60 * 60),
    )
    nearby: NamespaceConfig = NamespaceConfig(
        _env_int("FOODMAP_CACHE_NEARBY_SIZE", 200),
        _env_float("FOODMAP_CACHE_NEARBY_TTL", 10 * 60),
    )


DEFAULT_CACHE_CONFIG = CacheConfig()
