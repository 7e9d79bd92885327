"""Cache application services."""

from .stats_collector import CacheStatsCollector

__all__ = ["CacheStatsCollector"]
