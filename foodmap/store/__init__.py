"""
Durable storage collaborators.

- ``DocumentStore`` protocol and the ``InMemoryDocumentStore`` default.
- ``RestaurantCatalog``: pandas-backed curated restaurant list with
  coordinates, used as the pre-loaded candidate set for nearby queries.
"""

from .base import Collection, DocumentStore, Record
from .catalog import DEFAULT_CATALOG_CONFIG, CatalogConfig, RestaurantCatalog
from .memory import InMemoryDocumentStore

__all__ = [
    "CatalogConfig",
    "Collection",
    "DEFAULT_CATALOG_CONFIG",
    "DocumentStore",
    "InMemoryDocumentStore",
    "Record",
    "RestaurantCatalog",
]
