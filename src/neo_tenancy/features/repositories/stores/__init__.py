"""Entity store implementations."""

from .memory import InMemoryEntityStore

__all__ = ["InMemoryEntityStore"]
