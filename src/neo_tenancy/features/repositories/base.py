"""Tenant-isolated repository over an EntityStore.

Every scoped read is built through the QueryBuilder so the tenant filter is
always present. Isolation failures are raised as IsolationViolationError and
never turned into empty results; storage failures are wrapped in
RepositoryOperationFailedError with the original exception as the cause.
"""

import logging
from dataclasses import replace
from typing import Any, Awaitable, Generic, List, Optional, TypeVar

from ...core.context import (
    CROSS_TENANT_PERMISSION,
    TenantContext,
    get_current_tenant_context,
)
from ...core.exceptions import (
    CrossTenantAccessDeniedError,
    IsolationViolationError,
    NeoTenancyError,
    RepositoryOperationFailedError,
    SpecificationConversionError,
    TenantContextMissingError,
)
from ...core.value_objects import DepartmentId, EntityId, OrganizationId, TenantId
from ..queries.entities.options import PaginatedResult, QueryOptions
from ..queries.services.query_builder import QueryBuilder
from ..specifications.base import Specification
from ..specifications.entities.criteria import (
    PaginationCriteria,
    QueryCondition,
    QueryCriteria,
    QueryOperator,
)
from .entities.entity import TenantIsolatedEntity
from .protocols.store import EntityStore

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=TenantIsolatedEntity)


def _id_criteria(entity_id: EntityId) -> QueryCriteria:
    return QueryCriteria(conditions=(QueryCondition("id", QueryOperator.EQUALS, entity_id.value),))


class BaseTenantIsolatedRepository(Generic[E]):
    """Generic tenant-isolated repository.

    Example:
        store = InMemoryEntityStore("user")
        users = BaseTenantIsolatedRepository(store, "user")

        with bind_tenant_context(TenantContext(tenant_id=tenant)):
            await users.save(user)
            found = await users.find_by_id(user.id)
    """

    def __init__(
        self,
        store: EntityStore,
        entity_name: str,
        query_builder: Optional[QueryBuilder] = None,
    ):
        self.store = store
        self.entity_name = entity_name
        self.query_builder = query_builder or QueryBuilder()

    # Helpers

    async def _execute(self, operation: str, awaitable: Awaitable, entity_id: Optional[EntityId] = None) -> Any:
        try:
            return await awaitable
        except NeoTenancyError:
            raise
        except Exception as e:
            logger.error(
                "Repository operation %s failed for %s: %s",
                operation, self.entity_name, e.__class__.__name__,
            )
            raise RepositoryOperationFailedError(
                operation,
                self.entity_name,
                entity_id.value if entity_id is not None else None,
                cause=e,
            ) from e

    @staticmethod
    def _require_context(operation: str) -> TenantContext:
        context = get_current_tenant_context()
        if context is None:
            raise TenantContextMissingError(operation)
        return context

    def _scoped(self, criteria: QueryCriteria, context: TenantContext) -> QueryOptions:
        return self.query_builder.build_from_criteria(criteria, context)

    @staticmethod
    def _scope_context(
        context: TenantContext,
        tenant_id: TenantId,
        organization_id: Optional[OrganizationId] = None,
        department_id: Optional[DepartmentId] = None,
    ) -> TenantContext:
        """Context whose filter selects exactly the requested scope."""
        return replace(
            context,
            tenant_id=tenant_id,
            organization_id=organization_id,
            department_id=department_id,
        )

    def _unscoped_id_options(self, entity_id: EntityId) -> QueryOptions:
        return self.query_builder.build_from_criteria(_id_criteria(entity_id))

    def _ensure_can_write(self, entity: E, context: TenantContext) -> None:
        if not context.can_access_tenant(entity.tenant_id):
            raise IsolationViolationError(
                f"Context cannot write {self.entity_name} for tenant {entity.tenant_id.value}",
                scope="tenant",
                operation="save",
            )
        if entity.organization_id is not None and not context.can_access_organization(entity.organization_id):
            raise IsolationViolationError(
                f"Context cannot write {self.entity_name} for organization {entity.organization_id.value}",
                scope="organization",
                operation="save",
            )
        if entity.department_id is not None and not context.can_access_department(entity.department_id):
            raise IsolationViolationError(
                f"Context cannot write {self.entity_name} for department {entity.department_id.value}",
                scope="department",
                operation="save",
            )

    # Ambient-context operations

    async def find_by_id(self, entity_id: EntityId) -> Optional[E]:
        context = self._require_context("find_by_id")
        options = self._scoped(_id_criteria(entity_id), context)
        return await self._execute("find_by_id", self.store.find_one(options), entity_id)

    async def exists(self, entity_id: EntityId) -> bool:
        context = self._require_context("exists")
        options = self._scoped(_id_criteria(entity_id), context)
        count = await self._execute("exists", self.store.count(options), entity_id)
        return count > 0

    async def save(self, entity: E) -> E:
        context = self._require_context("save")
        self._ensure_can_write(entity, context)

        # An id owned by a scope the caller cannot see must not be overwritten
        existing = await self._execute("save", self.store.find_one(self._unscoped_id_options(entity.id)), entity.id)
        if existing is not None and not (
            context.can_access_tenant(existing.tenant_id)
            and (existing.organization_id is None or context.can_access_organization(existing.organization_id))
            and (existing.department_id is None or context.can_access_department(existing.department_id))
        ):
            raise IsolationViolationError(
                f"{self.entity_name} {entity.id.value} belongs to a scope outside the context",
                scope="tenant",
                operation="save",
            )

        saved = await self._execute("save", self.store.upsert(entity, entity.version), entity.id)
        logger.debug("Saved %s %s", self.entity_name, entity.id.value)
        return saved

    async def delete(self, entity_id: EntityId) -> bool:
        context = self._require_context("delete")
        options = self._scoped(_id_criteria(entity_id), context)
        removed = await self._execute("delete", self.store.remove(entity_id, options), entity_id)
        logger.debug("Deleted %s %s: %s", self.entity_name, entity_id.value, removed)
        return removed

    # Explicit-context reads

    async def find_by_id_with_context(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        options = self._scoped(_id_criteria(entity_id), context)
        return await self._execute("find_by_id_with_context", self.store.find_one(options), entity_id)

    async def find_all_by_context(self, context: TenantContext) -> List[E]:
        options = self.query_builder.build_for_context(context)
        return await self._execute("find_all_by_context", self.store.find_many(options))

    async def find_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> List[E]:
        if not context.can_access_tenant(tenant_id):
            raise IsolationViolationError(
                f"Context cannot access tenant {tenant_id.value}",
                scope="tenant",
                operation="find_by_tenant",
            )
        options = self.query_builder.build_for_context(self._scope_context(context, tenant_id))
        return await self._execute("find_by_tenant", self.store.find_many(options))

    async def find_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> List[E]:
        if not context.can_access_organization(organization_id):
            raise IsolationViolationError(
                f"Context cannot access organization {organization_id.value}",
                scope="organization",
                operation="find_by_organization",
            )
        scope = self._scope_context(context, organization_id.tenant_id, organization_id)
        options = self.query_builder.build_for_context(scope)
        return await self._execute("find_by_organization", self.store.find_many(options))

    async def find_by_department(self, department_id: DepartmentId, context: TenantContext) -> List[E]:
        if not context.can_access_department(department_id):
            raise IsolationViolationError(
                f"Context cannot access department {department_id.value}",
                scope="department",
                operation="find_by_department",
            )
        scope = self._scope_context(
            context, department_id.tenant_id, department_id.organization_id, department_id
        )
        options = self.query_builder.build_for_context(scope)
        return await self._execute("find_by_department", self.store.find_many(options))

    async def find_by_specification(self, specification: Specification, context: TenantContext) -> List[E]:
        try:
            options = self.query_builder.build_from_specification(specification, self.entity_name, context)
        except SpecificationConversionError as e:
            # Still scoped: load what the context can see and filter in memory
            logger.warning(
                "Specification for %s not translatable (%s); filtering in memory",
                self.entity_name, e.message,
            )
            candidates = await self.find_all_by_context(context)
            return [entity for entity in candidates if specification.is_satisfied_by(entity)]
        return await self._execute("find_by_specification", self.store.find_many(options))

    async def find_by_criteria(self, criteria: QueryCriteria, context: TenantContext) -> List[E]:
        options = self._scoped(criteria, context)
        return await self._execute("find_by_criteria", self.store.find_many(options))

    async def find_page(self, criteria: QueryCriteria, context: TenantContext) -> PaginatedResult[E]:
        pagination = criteria.pagination or PaginationCriteria()
        options = self._scoped(criteria.with_pagination(pagination), context)
        items = await self._execute("find_page", self.store.find_many(options))
        total = await self._execute(
            "find_page", self.store.count(replace(options, limit=None, offset=None))
        )
        return PaginatedResult(items=items, total=total, page=pagination.page, limit=pagination.limit)

    # Ownership checks

    async def _find_unscoped(self, operation: str, entity_id: EntityId) -> Optional[E]:
        return await self._execute(operation, self.store.find_one(self._unscoped_id_options(entity_id)), entity_id)

    async def belongs_to_tenant(self, entity_id: EntityId, tenant_id: TenantId) -> bool:
        entity = await self._find_unscoped("belongs_to_tenant", entity_id)
        return entity is not None and entity.belongs_to_tenant(tenant_id)

    async def belongs_to_organization(self, entity_id: EntityId, organization_id: OrganizationId) -> bool:
        entity = await self._find_unscoped("belongs_to_organization", entity_id)
        return entity is not None and entity.belongs_to_organization(organization_id)

    async def belongs_to_department(self, entity_id: EntityId, department_id: DepartmentId) -> bool:
        entity = await self._find_unscoped("belongs_to_department", entity_id)
        return entity is not None and entity.belongs_to_department(department_id)

    # Cross-tenant escape

    async def find_by_id_cross_tenant(self, entity_id: EntityId, context: TenantContext) -> Optional[E]:
        if not context.is_cross_tenant:
            raise CrossTenantAccessDeniedError("find_by_id_cross_tenant", "context is not cross-tenant")
        if not context.has_permission(CROSS_TENANT_PERMISSION):
            raise CrossTenantAccessDeniedError(
                "find_by_id_cross_tenant", f"missing permission '{CROSS_TENANT_PERMISSION}'"
            )
        logger.info(
            "Cross-tenant read of %s %s by tenant %s",
            self.entity_name, entity_id.value, context.tenant_id.value,
        )
        return await self._find_unscoped("find_by_id_cross_tenant", entity_id)

    # Counts

    async def count_by_tenant(self, tenant_id: TenantId, context: TenantContext) -> int:
        if not context.can_access_tenant(tenant_id):
            raise IsolationViolationError(
                f"Context cannot access tenant {tenant_id.value}",
                scope="tenant",
                operation="count_by_tenant",
            )
        options = self.query_builder.build_for_context(self._scope_context(context, tenant_id))
        return await self._execute("count_by_tenant", self.store.count(options))

    async def count_by_organization(self, organization_id: OrganizationId, context: TenantContext) -> int:
        if not context.can_access_organization(organization_id):
            raise IsolationViolationError(
                f"Context cannot access organization {organization_id.value}",
                scope="organization",
                operation="count_by_organization",
            )
        scope = self._scope_context(context, organization_id.tenant_id, organization_id)
        options = self.query_builder.build_for_context(scope)
        return await self._execute("count_by_organization", self.store.count(options))

    async def count_by_department(self, department_id: DepartmentId, context: TenantContext) -> int:
        if not context.can_access_department(department_id):
            raise IsolationViolationError(
                f"Context cannot access department {department_id.value}",
                scope="department",
                operation="count_by_department",
            )
        scope = self._scope_context(
            context, department_id.tenant_id, department_id.organization_id, department_id
        )
        options = self.query_builder.build_for_context(scope)
        return await self._execute("count_by_department", self.store.count(options))
