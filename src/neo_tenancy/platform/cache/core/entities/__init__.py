"""Cache entities."""

from .cache_entry import CacheEntry
from .cache_stats import CacheStats

__all__ = ["CacheEntry", "CacheStats"]
