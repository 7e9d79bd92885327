"""Repository protocols."""

from .repository import TenantIsolatedRepository
from .store import EntityStore

__all__ = ["TenantIsolatedRepository", "EntityStore"]
