from __future__ import annotations

from dataclasses import dataclass

from .admin.invalidation import InvalidationController
from .admin.refresh import ReviewRefresher
from .analytics.store import EventLog
from .auth.users import DEFAULT_AUTH_CONFIG, AdminAuthorizer, AuthConfig
from .cache.config import DEFAULT_CACHE_CONFIG, CacheConfig
from .cache.registry import CacheRegistry
from .geo.service import NearbyService
from .lookups.aggregator import BatchAggregator
from .lookups.config import DEFAULT_LOOKUP_CONFIG, LookupConfig
from .lookups.service import AttributeLookupService
from .sources.base import PlaceSource
from .sources.google_places import GooglePlacesSource
from .store.base import DocumentStore
from .store.catalog import DEFAULT_CATALOG_CONFIG, CatalogConfig, RestaurantCatalog
from .store.memory import InMemoryDocumentStore


@dataclass
class Engine:
    """Every long-lived component, wired once at service start."""

    caches: CacheRegistry
    store: DocumentStore
    source: PlaceSource
    catalog: RestaurantCatalog
    events: EventLog
    authorizer: AdminAuthorizer
    lookups: AttributeLookupService
    batch: BatchAggregator
    nearby: NearbyService
    invalidation: InvalidationController
    refresher: ReviewRefresher


def build_engine(
    *,
    store: DocumentStore | None = None,
    source: PlaceSource | None = None,
    cache_config: CacheConfig = DEFAULT_CACHE_CONFIG,
    lookup_config: LookupConfig = DEFAULT_LOOKUP_CONFIG,
    auth_config: AuthConfig = DEFAULT_AUTH_CONFIG,
    catalog_config: CatalogConfig = DEFAULT_CATALOG_CONFIG,
) -> Engine:
    caches = CacheRegistry(cache_config)
    store = store if store is not None else InMemoryDocumentStore()
    source = source if source is not None else GooglePlacesSource()
    catalog = RestaurantCatalog(catalog_config)
    events = EventLog()
    authorizer = AdminAuthorizer(auth_config)

    lookups = AttributeLookupService(caches, store, source, lookup_config, events)
    return Engine(
        caches=caches,
        store=store,
        source=source,
        catalog=catalog,
        events=events,
        authorizer=authorizer,
        lookups=lookups,
        batch=BatchAggregator(caches, store, lookup_config, events),
        nearby=NearbyService(catalog, source, caches, lookup_config.timeout, events),
        invalidation=InvalidationController(caches, store, authorizer),
        refresher=ReviewRefresher(
            lookups,
            batch_size=lookup_config.refresh_batch_size,
            delay=lookup_config.refresh_delay,
        ),
    )
