"""
Tiered restaurant attribute lookups.

Responsibilities:
- Orchestrate memory -> durable -> external reads per key (``TieredLookup``).
- Serve single-restaurant attribute lookups (``AttributeLookupService``).
- Aggregate many restaurants' attributes concurrently (``BatchAggregator``).
"""

from .aggregator import BatchAggregator, BatchResult
from .config import DEFAULT_LOOKUP_CONFIG, LookupConfig
from .kinds import KIND_SPECS, KindSpec
from .models import AttributeKind, LookupResult, Tier
from .orchestrator import TieredLookup
from .service import AttributeLookupService

__all__ = [
    "AttributeKind",
    "AttributeLookupService",
    "BatchAggregator",
    "BatchResult",
    "DEFAULT_LOOKUP_CONFIG",
    "KIND_SPECS",
    "KindSpec",
    "LookupConfig",
    "LookupResult",
    "Tier",
    "TieredLookup",
]
