"""Cached repository decorator.

Wraps any TenantIsolatedRepository and caches ``find_by_id`` and ``exists``
results under tenant-namespaced keys. The key also hashes the caller's scope
(organization, department, cross-tenant authorization), since the inner
repository narrows results by it. Writes go to the inner repository first
and then invalidate by tag, so a cached "not found" or ``exists=False`` never
outlives a later save. Cache failures degrade to a miss: correctness never
depends on the cache being available.
"""

import copy
import logging
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar, Union

from ...config.settings import CacheSettings, get_cache_settings
from ...core.context import TenantContext, get_current_tenant_context
from ...core.exceptions import CacheBackendError, ConcurrencyConflictError
from ...core.value_objects import DepartmentId, EntityId, OrganizationId, TenantId
from ...platform.cache.core.entities.cache_entry import CacheEntry
from ...platform.cache.core.protocols.cache import Cache
from ...platform.cache.core.value_objects.invalidation_pattern import InvalidationPattern
from ...platform.cache.infrastructure.repositories.memory_cache import InMemoryCache
from ...platform.cache.utils.key_builder import CacheKeyBuilder
from ..queries.entities.options import PaginatedResult
from ..specifications.base import Specification
from ..specifications.entities.criteria import QueryCriteria
from .protocols.repository import TenantIsolatedRepository

logger = logging.getLogger(__name__)

E = TypeVar("E")

TenantIdProvider = Callable[[], Optional[str]]


def ambient_tenant_discriminator() -> Optional[str]:
    """Tenant id of the bound context, or None when no context is bound."""
    context = get_current_tenant_context()
    return context.tenant_id.value if context is not None else None


def ambient_scope() -> Optional[Dict[str, Any]]:
    """Narrowing of the bound context that changes what the inner repository returns."""
    context = get_current_tenant_context()
    if context is None:
        return None
    return {
        "organization_id": context.organization_id.value if context.organization_id else None,
        "department_id": context.department_id.value if context.department_id else None,
        "cross_tenant": context.is_cross_tenant_authorized,
    }


def _id_value(entity_id: Any) -> str:
    return entity_id.value if hasattr(entity_id, "value") else str(entity_id)


class CachedRepository(Generic[E]):
    """Caching decorator around a tenant-isolated repository.

    Only ``find_by_id`` and ``exists`` are cached. Scoped list reads, counts
    and ownership checks are delegated unchanged so they stay authoritative.
    """

    def __init__(
        self,
        inner: TenantIsolatedRepository,
        entity_name: str,
        cache: Cache,
        options: Optional[CacheSettings] = None,
        tenant_id_provider: Optional[TenantIdProvider] = None,
    ):
        self.inner = inner
        self.entity_name = entity_name
        self.cache = cache
        self.options = options or get_cache_settings()
        self.tenant_id_provider = tenant_id_provider or ambient_tenant_discriminator
        self.keys = CacheKeyBuilder(self.options.key_prefix)
        # Write generation per entity-type tag; reads loaded across a write are not cached
        self._generations: Dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self.options.enabled

    # Cache plumbing

    def _tags(self, tenant: Optional[str], entity_id: Any) -> List[str]:
        return [
            self.keys.entity_tag(tenant, self.entity_name),
            self.keys.entity_id_tag(tenant, self.entity_name, _id_value(entity_id)),
        ]

    async def _cache_get(self, key: str) -> Optional[CacheEntry]:
        try:
            return await self.cache.get(key)
        except CacheBackendError as e:
            logger.warning("Cache read failed for %s, treating as miss: %s", key, e.message)
            return None

    async def _cache_set(self, key: str, value: Any, tags: Iterable[str]) -> None:
        try:
            await self.cache.set(key, value, ttl_ms=self.options.default_ttl_ms, tags=tags)
        except CacheBackendError as e:
            logger.warning("Cache write failed for %s: %s", key, e.message)

    def _generation(self, tenant: Optional[str]) -> int:
        return self._generations.get(self.keys.entity_tag(tenant, self.entity_name), 0)

    def _advance_generation(self, tenants: Iterable[Optional[str]]) -> None:
        for tenant in tenants:
            tag = self.keys.entity_tag(tenant, self.entity_name)
            self._generations[tag] = self._generations.get(tag, 0) + 1

    def _write_tenants(self, extra_tenants: Iterable[Optional[str]] = ()) -> List[Optional[str]]:
        tenants = [self.tenant_id_provider()]
        for tenant in extra_tenants:
            if tenant not in tenants:
                tenants.append(tenant)
        return tenants

    async def _cached_read(self, operation: str, entity_id: EntityId, loader: Callable):
        if not self.enabled:
            return await loader()

        tenant = self.tenant_id_provider()
        key = self.keys.repository_key(
            tenant, self.entity_name, operation, [_id_value(entity_id), ambient_scope()]
        )

        entry = await self._cache_get(key)
        if entry is not None:
            logger.debug("Cache hit for %s.%s", self.entity_name, operation)
            return copy.deepcopy(entry.value)

        generation = self._generation(tenant)
        # Errors propagate before anything is cached
        result = await loader()
        if self._generation(tenant) != generation:
            logger.debug("Not caching %s.%s: a write landed during the load", self.entity_name, operation)
            return result
        await self._cache_set(key, copy.deepcopy(result), self._tags(tenant, entity_id))
        return result

    async def _invalidate_ids(self, entity_ids: Iterable[Any], extra_tenants: Iterable[Optional[str]] = ()) -> int:
        if not self.enabled:
            return 0
        entity_ids = list(entity_ids)
        tenants = self._write_tenants(extra_tenants)
        self._advance_generation(tenants)

        tags: List[str] = []
        for tenant in tenants:
            tags.append(self.keys.entity_tag(tenant, self.entity_name))
            for entity_id in entity_ids:
                tags.append(self.keys.entity_id_tag(tenant, self.entity_name, _id_value(entity_id)))
        try:
            removed = await self.cache.invalidate_by_tags(tags)
            logger.debug("Invalidated %d cached %s entries", removed, self.entity_name)
            return removed
        except CacheBackendError as e:
            logger.error(
                "Cache invalidation failed for %s %s: %s",
                self.entity_name, ", ".join(_id_value(entity_id) for entity_id in entity_ids), e.message,
            )
            return 0

    async def _invalidate(self, entity_id: Any, extra_tenants: Iterable[Optional[str]] = ()) -> None:
        await self._invalidate_ids([entity_id], extra_tenants)

    # Cached reads

    async def find_by_id(self, entity_id: EntityId) -> Optional[E]:
        return await self._cached_read("find_by_id", entity_id, lambda: self.inner.find_by_id(entity_id))

    async def exists(self, entity_id: EntityId) -> bool:
        return await self._cached_read("exists", entity_id, lambda: self.inner.exists(entity_id))

    # Writes

    async def save(self, entity: E) -> E:
        owner = getattr(entity, "tenant_id", None)
        extra = [owner.value] if isinstance(owner, TenantId) else []
        self._advance_generation(self._write_tenants(extra))
        try:
            result = await self.inner.save(entity)
        except ConcurrencyConflictError:
            # The cached copy is now known to be stale
            await self._invalidate(entity.id, extra)
            raise
        await self._invalidate(entity.id, extra)
        return result

    async def delete(self, entity_id: EntityId) -> bool:
        self._advance_generation(self._write_tenants())
        try:
            result = await self.inner.delete(entity_id)
        except ConcurrencyConflictError:
            await self._invalidate(entity_id)
            raise
        await self._invalidate(entity_id)
        return result

    # Explicit invalidation

    async def invalidate_entity(self, entity_id: EntityId) -> None:
        await self._invalidate(entity_id)

    async def invalidate_entities(self, entity_ids: Iterable[EntityId]) -> int:
        """Invalidate several entities in one tag sweep, e.g. after a bulk update."""
        return await self._invalidate_ids(entity_ids)

    async def invalidate_all(self) -> int:
        """Drop every cached entry of this entity type for the current tenant."""
        tenant = self.tenant_id_provider()
        self._advance_generation([tenant])
        tag = self.keys.entity_tag(tenant, self.entity_name)
        try:
            return await self.cache.invalidate_by_tag(tag)
        except CacheBackendError as e:
            logger.error("Cache invalidation failed for tag %s: %s", tag, e.message)
            return 0

    async def invalidate_by_pattern(self, pattern: Union[str, InvalidationPattern, None] = None) -> int:
        """Invalidate by an explicit pattern, or every key of this entity for the current tenant."""
        if pattern is None:
            pattern = self.keys.entity_pattern(self.tenant_id_provider(), self.entity_name)
        try:
            return await self.cache.invalidate_by_pattern(pattern)
        except CacheBackendError as e:
            logger.error("Cache invalidation failed for pattern %s: %s", pattern, e.message)
            return 0

    # Delegated operations

    async def find_by_id_with_context(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        return await self.inner.find_by_id_with_context(entity_id, context)

    async def find_all_by_context(self, context: TenantContext) -> List[E]:
        return await self.inner.find_all_by_context(context)

    async def find_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> List[E]:
        return await self.inner.find_by_tenant(tenant_id, context)

    async def find_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> List[E]:
        return await self.inner.find_by_organization(organization_id, context)

    async def find_by_department(self, department_id: DepartmentId, context: TenantContext) -> List[E]:
        return await self.inner.find_by_department(department_id, context)

    async def find_by_specification(self, specification: Specification, context: TenantContext) -> List[E]:
        return await self.inner.find_by_specification(specification, context)

    async def find_by_criteria(self, criteria: QueryCriteria, context: TenantContext) -> List[E]:
        return await self.inner.find_by_criteria(criteria, context)

    async def find_page(self, criteria: QueryCriteria, context: TenantContext) -> PaginatedResult[E]:
        return await self.inner.find_page(criteria, context)

    async def belongs_to_tenant(self, entity_id: EntityId, tenant_id: TenantId) -> bool:
        return await self.inner.belongs_to_tenant(entity_id, tenant_id)

    async def belongs_to_organization(self, entity_id: EntityId, organization_id: OrganizationId) -> bool:
        return await self.inner.belongs_to_organization(entity_id, organization_id)

    async def belongs_to_department(self, entity_id: EntityId, department_id: DepartmentId) -> bool:
        return await self.inner.belongs_to_department(entity_id, department_id)

    async def find_by_id_cross_tenant(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        return await self.inner.find_by_id_cross_tenant(entity_id, context)

    async def count_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> int:
        return await self.inner.count_by_tenant(tenant_id, context)

    async def count_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> int:
        return await self.inner.count_by_organization(organization_id, context)

    async def count_by_department(self, department_id: DepartmentId, context: TenantContext) -> int:
        return await self.inner.count_by_department(department_id, context)


def create_cached_repository(
    inner: TenantIsolatedRepository,
    entity_name: str,
    cache: Optional[Cache] = None,
    settings: Optional[CacheSettings] = None,
    tenant_id_provider: Optional[TenantIdProvider] = None,
) -> CachedRepository:
    """Compose a cached repository.

    Args:
        inner: Repository to decorate
        entity_name: Entity type used in cache keys and tags
        cache: Shared cache instance; a new InMemoryCache is built from settings when omitted
        settings: Cache settings; environment defaults when omitted
        tenant_id_provider: Callable returning the tenant discriminator

    Returns:
        Configured cached repository
    """
    settings = settings or get_cache_settings()
    if cache is None:
        cache = InMemoryCache.from_settings(settings)
    return CachedRepository(inner, entity_name, cache, settings, tenant_id_provider)
