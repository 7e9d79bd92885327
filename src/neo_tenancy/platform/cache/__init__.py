"""Cache platform for neo-tenancy.

Tag-aware, TTL-bounded, size-bounded in-memory cache shared by cached
repositories within one process.
"""

from .core import (
    Cache,
    CacheEntry,
    CacheStats,
    EvictionStrategy,
    InvalidationPattern,
    PatternType,
)
from .application import CacheStatsCollector
from .infrastructure import InMemoryCache, create_memory_cache
from .utils import GLOBAL_TENANT_SENTINEL, CacheKeyBuilder, canonical_json, hash_args

__all__ = [
    "Cache",
    "CacheEntry",
    "CacheStats",
    "EvictionStrategy",
    "InvalidationPattern",
    "PatternType",
    "CacheStatsCollector",
    "InMemoryCache",
    "create_memory_cache",
    "GLOBAL_TENANT_SENTINEL",
    "CacheKeyBuilder",
    "canonical_json",
    "hash_args",
]
