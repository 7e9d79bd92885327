"""Cache implementations."""

from .memory_cache import InMemoryCache, create_memory_cache

__all__ = ["InMemoryCache", "create_memory_cache"]
