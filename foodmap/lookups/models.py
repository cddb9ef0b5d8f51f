from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

V = TypeVar("V")


class Tier(str, Enum):
    memory = "memory"
    durable = "durable"
    external = "external"


class AttributeKind(str, Enum):
    rating = "rating"
    photo = "photo"
    reviews = "reviews"
    price = "price"


@dataclass(frozen=True)
class LookupResult(Generic[V]):
    value: V | None
    source: Tier

    @property
    def found(self) -> bool:
        return self.value is not None


class BatchRequest(BaseModel):
    restaurants: list[str] = Field(..., min_length=1, description="Restaurant names; only the first 50 are used")
    include: list[AttributeKind] = Field(..., min_length=1)


class BatchResponse(BaseModel):
    success: bool = True
    results: dict[str, dict[AttributeKind, dict[str, Any]]]


class LookupResponse(BaseModel):
    name: str
    kind: AttributeKind
    source: Tier
    found: bool
    data: dict[str, Any] | None = None
