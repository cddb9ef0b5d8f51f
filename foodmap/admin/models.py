from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .invalidation import InvalidationScope


class MemoryInvalidationType(str, Enum):
    all = "all"
    restaurant = "restaurant"


class MemoryInvalidationRequest(BaseModel):
    type: MemoryInvalidationType
    name: str | None = Field(default=None, min_length=1)


class DurableInvalidationRequest(BaseModel):
    type: InvalidationScope = InvalidationScope.all
    name: str | None = Field(default=None, min_length=1)


class DurableInvalidationResponse(BaseModel):
    message: str
    timestamp: str
    type: InvalidationScope
    restaurant_name: str
    deleted: dict[str, int]


class RefreshRequest(BaseModel):
    restaurants: list[str] | None = Field(
        default=None, description="Names to refresh; defaults to the whole catalog",
    )


class RefreshResponse(BaseModel):
    message: str
    timestamp: str
    total: int
    success_count: int
    failed_count: int
    failed: list[dict[str, str]]
