"""Cache infrastructure."""

from .repositories import InMemoryCache, create_memory_cache

__all__ = ["InMemoryCache", "create_memory_cache"]
