"""Tenant context and permission model.

A TenantContext describes who is asking and which scope they may see. It is
created once per logical operation and never mutated; derived variants are
produced by cloning. The ambient context for the running asyncio task is held
in a ContextVar so repositories can pick it up without explicit passing.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Iterator, Optional

from ..exceptions import InvalidTenantContextError
from ..value_objects import DepartmentId, OrganizationId, TenantId, ValidationResult
from ..value_objects.validation import validate_uuid

logger = logging.getLogger(__name__)

CROSS_TENANT_PERMISSION = "cross-tenant:read"


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TenantContext:
    """Immutable caller scope.

    Access checks never raise: they answer True or False and leave it to the
    repository layer to turn a refusal into an isolation error.
    """

    tenant_id: TenantId
    organization_id: Optional[OrganizationId] = None
    department_id: Optional[DepartmentId] = None
    is_cross_tenant: bool = False
    permissions: FrozenSet[str] = field(default_factory=frozenset)
    user_id: Optional[str] = None
    extracted_at: datetime = field(default_factory=utc_now, compare=False)

    def __post_init__(self):
        if not isinstance(self.permissions, frozenset):
            object.__setattr__(self, "permissions", frozenset(self.permissions))

    # Permission model

    def has_permission(self, name: str) -> bool:
        return name in self.permissions

    @property
    def is_cross_tenant_authorized(self) -> bool:
        """Cross-tenant flag only counts together with the elevated permission."""
        return self.is_cross_tenant and self.has_permission(CROSS_TENANT_PERMISSION)

    def can_access_tenant(self, tenant_id: Optional[TenantId]) -> bool:
        if tenant_id is None:
            return False
        if self.is_cross_tenant_authorized:
            return True
        return self.tenant_id == tenant_id

    def can_access_organization(self, organization_id: Optional[OrganizationId]) -> bool:
        if organization_id is None:
            return False
        if self.is_cross_tenant_authorized:
            return True
        if not self.can_access_tenant(organization_id.tenant_id):
            return False
        if self.organization_id is None:
            return True
        return (
            organization_id == self.organization_id
            or organization_id.is_ancestor_of(self.organization_id)
            or organization_id.is_descendant_of(self.organization_id)
        )

    def can_access_department(self, department_id: Optional[DepartmentId]) -> bool:
        if department_id is None:
            return False
        if self.is_cross_tenant_authorized:
            return True
        if self.organization_id is not None:
            # Departments never widen to ancestor or descendant organizations
            if not self.can_access_tenant(department_id.tenant_id):
                return False
            if not department_id.belongs_to(self.organization_id):
                return False
        elif not self.can_access_organization(department_id.organization_id):
            return False
        if self.department_id is None:
            return True
        return (
            department_id == self.department_id
            or department_id.is_ancestor_of(self.department_id)
            or department_id.is_descendant_of(self.department_id)
        )

    # Validation

    def validate(self) -> ValidationResult:
        """Check well-formedness and internal consistency of the scope."""
        value = self.tenant_id.value if isinstance(self.tenant_id, TenantId) else self.tenant_id
        result = validate_uuid(value, "tenant_id")
        if not result.is_valid:
            return result

        errors = []
        if self.department_id is not None and self.organization_id is None:
            errors.append("department_id requires organization_id")
        if self.organization_id is not None and not self.organization_id.belongs_to(self.tenant_id):
            errors.append("organization_id does not belong to tenant_id")
        if (
            self.department_id is not None
            and self.organization_id is not None
            and not self.department_id.belongs_to(self.organization_id)
        ):
            errors.append("department_id does not belong to organization_id")
        return ValidationResult(errors=errors)

    def ensure_valid(self) -> "TenantContext":
        result = self.validate()
        if not result.is_valid:
            raise InvalidTenantContextError(result.errors)
        return self

    # Cloning

    def with_organization(self, organization_id: Optional[OrganizationId]) -> "TenantContext":
        """Derive a context narrowed to an organization. Drops any department."""
        return replace(self, organization_id=organization_id, department_id=None)

    def with_department(self, department_id: DepartmentId) -> "TenantContext":
        return replace(
            self,
            organization_id=department_id.organization_id,
            department_id=department_id,
        )

    def with_permissions(self, permissions: Iterable[str]) -> "TenantContext":
        return replace(self, permissions=self.permissions | frozenset(permissions))

    def as_cross_tenant(self) -> "TenantContext":
        return replace(self, is_cross_tenant=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id.value,
            "organization_id": self.organization_id.value if self.organization_id else None,
            "department_id": self.department_id.value if self.department_id else None,
            "is_cross_tenant": self.is_cross_tenant,
            "permissions": sorted(self.permissions),
            "user_id": self.user_id,
            "extracted_at": self.extracted_at.isoformat(),
        }


# Ambient context for the running task (async-friendly)
tenant_context_var: ContextVar[Optional[TenantContext]] = ContextVar(
    "tenant_context", default=None
)


def get_current_tenant_context() -> Optional[TenantContext]:
    return tenant_context_var.get()


@contextmanager
def bind_tenant_context(context: TenantContext) -> Iterator[TenantContext]:
    """Bind a context for the duration of the block, restoring the previous one after."""
    token = tenant_context_var.set(context)
    logger.debug("Bound tenant context for tenant %s", context.tenant_id.value)
    try:
        yield context
    finally:
        tenant_context_var.reset(token)
