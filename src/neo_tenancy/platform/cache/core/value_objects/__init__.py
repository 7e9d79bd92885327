"""Cache value objects."""

from .eviction_strategy import EvictionStrategy
from .invalidation_pattern import InvalidationPattern, PatternType

__all__ = ["EvictionStrategy", "InvalidationPattern", "PatternType"]
