from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from ..geo.models import GeoPoint, ProximityCandidate

_DEFAULT_CSV = Path(__file__).resolve().parent.parent / "data" / "restaurants.csv"


@dataclass(frozen=True)
class CatalogConfig:
    csv_path: Path = Path(os.getenv("FOODMAP_CATALOG_CSV", str(_DEFAULT_CSV)))


DEFAULT_CATALOG_CONFIG = CatalogConfig()

CATALOG_COLUMNS = [
    "id",
    "name",
    "category",
    "location",
    "rating",
    "review_count",
    "price_range",
    "lat",
    "lng",
]


class RestaurantCatalog:
    """Curated restaurant list, the pre-loaded point set for nearby queries."""

    def __init__(self, config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> None:
        self.config = config
        self._df: pd.DataFrame | None = None

    def _load(self) -> pd.DataFrame:
        df = pd.read_csv(self.config.csv_path, dtype={"id": str})
        df["category_lower"] = df["category"].fillna("").str.lower()
        df["lat"] = pd.to_numeric(df["lat"], errors="coerce")
        df["lng"] = pd.to_numeric(df["lng"], errors="coerce")
        return df

    def dataframe(self) -> pd.DataFrame:
        """Return the catalog DataFrame, loading it on first call."""
        if self._df is None:
            self._df = self._load()
        return self._df

    def names(self) -> list[str]:
        return self.dataframe()["name"].tolist()

    def candidates(self, category: str | None = None) -> list[ProximityCandidate]:
        """Catalog rows with coordinates, optionally limited to one category."""
        df = self.dataframe()
        mask = df["lat"].notna() & df["lng"].notna()
        if category:
            mask = mask & (df["category_lower"] == category.strip().lower())

        out: list[ProximityCandidate] = []
        for _, row in df.loc[mask].iterrows():
            out.append(ProximityCandidate(
                id=str(row["id"]),
                point=GeoPoint(lat=float(row["lat"]), lng=float(row["lng"])),
                payload={
                    "name": row["name"],
                    "category": row["category"],
                    "location": row["location"],
                    "rating": float(row["rating"]) if pd.notna(row["rating"]) else None,
                    "review_count": int(row["review_count"]) if pd.notna(row["review_count"]) else None,
                    "price_range": row["price_range"] if pd.notna(row["price_range"]) else None,
                },
            ))
        return out

    def metadata(self) -> dict[str, list[str]]:
        df = self.dataframe()
        return {
            "categories": sorted(df["category"].dropna().unique().tolist()),
            "locations": sorted(df["location"].dropna().unique().tolist()),
        }
