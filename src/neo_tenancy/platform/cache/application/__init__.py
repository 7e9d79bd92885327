"""Cache application layer."""

from .services import CacheStatsCollector

__all__ = ["CacheStatsCollector"]
