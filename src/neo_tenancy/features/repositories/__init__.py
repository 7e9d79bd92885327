"""Repository feature for neo-tenancy.

Tenant-isolated repository contract, its generic implementation over an
entity store, and the caching decorator.
"""

from .entities import TenantIsolatedEntity
from .protocols import EntityStore, TenantIsolatedRepository
from .stores import InMemoryEntityStore
from .base import BaseTenantIsolatedRepository
from .cached_repository import (
    CachedRepository,
    ambient_scope,
    ambient_tenant_discriminator,
    create_cached_repository,
)

__all__ = [
    "TenantIsolatedEntity",
    "EntityStore",
    "TenantIsolatedRepository",
    "InMemoryEntityStore",
    "BaseTenantIsolatedRepository",
    "CachedRepository",
    "ambient_scope",
    "ambient_tenant_discriminator",
    "create_cached_repository",
]
