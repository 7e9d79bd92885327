"""Eviction strategy value object."""

from enum import Enum


class EvictionStrategy(str, Enum):
    """Policy applied when the cache exceeds its size bound."""

    LRU = "LRU"    # Least Recently Used
    LFU = "LFU"    # Least Frequently Used
    FIFO = "FIFO"  # First In, First Out

    @classmethod
    def parse(cls, value) -> "EvictionStrategy":
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())
