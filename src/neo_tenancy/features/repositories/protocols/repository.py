"""Tenant-isolated repository protocol.

The only data-access surface callers above this layer should use. Every
scoped read applies the tenant filter; the single unscoped read is
``find_by_id_cross_tenant`` and it refuses contexts without the elevated
permission.
"""

from typing import List, Optional, Protocol, TypeVar, runtime_checkable

from ....core.context import TenantContext
from ....core.value_objects import DepartmentId, EntityId, OrganizationId, TenantId
from ...queries.entities.options import PaginatedResult
from ...specifications.base import Specification
from ...specifications.entities.criteria import QueryCriteria

E = TypeVar("E")


@runtime_checkable
class TenantIsolatedRepository(Protocol[E]):
    """Repository contract with mandatory tenant scoping."""

    # Ambient-context operations

    async def find_by_id(self, entity_id: EntityId) -> Optional[E]:
        """Find within the bound tenant context; None when not found or not visible."""
        ...

    async def exists(self, entity_id: EntityId) -> bool:
        ...

    async def save(self, entity: E) -> E:
        ...

    async def delete(self, entity_id: EntityId) -> bool:
        ...

    # Explicit-context reads

    async def find_by_id_with_context(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        ...

    async def find_all_by_context(self, context: TenantContext) -> List[E]:
        ...

    async def find_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> List[E]:
        ...

    async def find_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> List[E]:
        """Exact match; descendants are not included."""
        ...

    async def find_by_department(self, department_id: DepartmentId, context: TenantContext) -> List[E]:
        """Exact match; descendants are not included."""
        ...

    async def find_by_specification(self, specification: Specification, context: TenantContext) -> List[E]:
        ...

    async def find_by_criteria(self, criteria: QueryCriteria, context: TenantContext) -> List[E]:
        ...

    async def find_page(self, criteria: QueryCriteria, context: TenantContext) -> PaginatedResult[E]:
        ...

    # Ownership checks

    async def belongs_to_tenant(self, entity_id: EntityId, tenant_id: TenantId) -> bool:
        ...

    async def belongs_to_organization(self, entity_id: EntityId, organization_id: OrganizationId) -> bool:
        ...

    async def belongs_to_department(self, entity_id: EntityId, department_id: DepartmentId) -> bool:
        ...

    # Cross-tenant escape

    async def find_by_id_cross_tenant(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        ...

    # Counts

    async def count_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> int:
        ...

    async def count_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> int:
        ...

    async def count_by_department(self, department_id: DepartmentId, context: TenantContext) -> int:
        ...
