"""Base entity for tenant-isolated storage."""

from dataclasses import dataclass
from typing import Optional

from ....core.exceptions import InvalidIdentifierError
from ....core.value_objects import DepartmentId, EntityId, OrganizationId, TenantId


@dataclass
class TenantIsolatedEntity:
    """Entity owned by exactly one tenant and optionally scoped further.

    ``version`` drives optimistic locking: it is the version the caller last
    read, and stores bump it on every successful save.
    """

    id: EntityId
    tenant_id: TenantId
    organization_id: Optional[OrganizationId] = None
    department_id: Optional[DepartmentId] = None
    version: int = 0

    def __post_init__(self):
        if self.organization_id is not None and not self.organization_id.belongs_to(self.tenant_id):
            raise InvalidIdentifierError(
                "Entity organization does not belong to the entity tenant",
                identifier_type="OrganizationId",
                value=self.organization_id.value,
            )
        if self.department_id is not None:
            if self.organization_id is None:
                raise InvalidIdentifierError(
                    "Entity department requires an organization",
                    identifier_type="DepartmentId",
                    value=self.department_id.value,
                )
            if not self.department_id.belongs_to(self.organization_id):
                raise InvalidIdentifierError(
                    "Entity department does not belong to the entity organization",
                    identifier_type="DepartmentId",
                    value=self.department_id.value,
                )

    def belongs_to_tenant(self, tenant_id: TenantId) -> bool:
        return self.tenant_id == tenant_id

    def belongs_to_organization(self, organization_id: OrganizationId) -> bool:
        return self.organization_id is not None and self.organization_id == organization_id

    def belongs_to_department(self, department_id: DepartmentId) -> bool:
        return self.department_id is not None and self.department_id == department_id
