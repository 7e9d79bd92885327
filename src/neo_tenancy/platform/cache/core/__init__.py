"""Cache core: entities, value objects and protocols."""

from .entities import CacheEntry, CacheStats
from .value_objects import EvictionStrategy, InvalidationPattern, PatternType
from .protocols import Cache

__all__ = [
    "CacheEntry",
    "CacheStats",
    "EvictionStrategy",
    "InvalidationPattern",
    "PatternType",
    "Cache",
]
