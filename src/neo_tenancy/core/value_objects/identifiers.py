"""Value objects for hierarchical identifiers in neo-tenancy.

Tenants sit at the root; organizations belong to a tenant and may nest under a
parent organization; departments belong to an organization and may nest under
a parent department. Parents are embedded as immutable value copies, so the
hierarchy is acyclic by construction and never needs re-validation after the
identifier has been created.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

from ...utils.uuid import generate_uuid_v7
from ..exceptions import InvalidIdentifierError
from .validation import validate_uuid


def _checked_value(value: Any, identifier_type: str) -> str:
    result = validate_uuid(value, identifier_type)
    if not result.is_valid:
        raise InvalidIdentifierError(
            f"Invalid {identifier_type} format: {value!r}",
            identifier_type=identifier_type,
            value=value,
        )
    return value.lower()


@dataclass(frozen=True)
class TenantId:
    """Tenant identifier value object. Root of the hierarchy."""
    value: str

    def __post_init__(self):
        object.__setattr__(self, "value", _checked_value(self.value, "TenantId"))

    @classmethod
    def generate(cls) -> "TenantId":
        """Generate a new TenantId using UUIDv7 for time-ordering."""
        return cls(generate_uuid_v7())

    @classmethod
    def from_string(cls, value: str) -> "TenantId":
        return cls(value)

    def is_valid(self) -> bool:
        return validate_uuid(self.value, "TenantId").is_valid

    def equals(self, other: Optional["TenantId"]) -> bool:
        return isinstance(other, TenantId) and self.value == other.value

    def clone(self) -> "TenantId":
        return TenantId(self.value)

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value}

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OrganizationId:
    """Organization identifier bound to a tenant, optionally nested under a parent.

    Equality considers the value and owning tenant; the parent chain is
    structural information only.
    """
    value: str
    tenant_id: TenantId
    parent: Optional["OrganizationId"] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "value", _checked_value(self.value, "OrganizationId"))
        if not isinstance(self.tenant_id, TenantId):
            raise InvalidIdentifierError(
                "OrganizationId requires a TenantId owner",
                identifier_type="OrganizationId",
            )
        if self.parent is not None:
            if not isinstance(self.parent, OrganizationId):
                raise InvalidIdentifierError(
                    "Parent of an OrganizationId must be an OrganizationId",
                    identifier_type="OrganizationId",
                )
            if not self.parent.belongs_to(self.tenant_id):
                raise InvalidIdentifierError(
                    f"Parent organization {self.parent.value} belongs to tenant "
                    f"{self.parent.tenant_id.value}, not {self.tenant_id.value}",
                    identifier_type="OrganizationId",
                    value=self.value,
                )
            if self.parent.value == self.value:
                raise InvalidIdentifierError(
                    "An organization cannot be its own parent",
                    identifier_type="OrganizationId",
                    value=self.value,
                )

    @classmethod
    def generate(
        cls, tenant_id: TenantId, parent: Optional["OrganizationId"] = None
    ) -> "OrganizationId":
        return cls(generate_uuid_v7(), tenant_id, parent)

    @classmethod
    def from_string(
        cls, value: str, tenant_id: TenantId, parent: Optional["OrganizationId"] = None
    ) -> "OrganizationId":
        return cls(value, tenant_id, parent)

    def is_valid(self) -> bool:
        return validate_uuid(self.value, "OrganizationId").is_valid and self.tenant_id.is_valid()

    def equals(self, other: Optional["OrganizationId"]) -> bool:
        return isinstance(other, OrganizationId) and self == other

    def clone(self) -> "OrganizationId":
        return OrganizationId(self.value, self.tenant_id, self.parent)

    def belongs_to(self, tenant_id: TenantId) -> bool:
        """Check whether this organization is owned by the given tenant."""
        return self.tenant_id == tenant_id

    def ancestors(self) -> Iterator["OrganizationId"]:
        """Yield parents from nearest to root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_ancestor_of(self, other: Optional["OrganizationId"]) -> bool:
        """Walk the candidate's parent chain looking for this organization."""
        if other is None:
            return False
        return any(ancestor == self for ancestor in other.ancestors())

    def is_descendant_of(self, other: Optional["OrganizationId"]) -> bool:
        if other is None:
            return False
        return other.is_ancestor_of(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "tenant_id": self.tenant_id.value,
            "parent": self.parent.to_dict() if self.parent else None,
        }

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DepartmentId:
    """Department identifier bound to an organization, optionally nested under a parent."""
    value: str
    organization_id: OrganizationId
    parent: Optional["DepartmentId"] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "value", _checked_value(self.value, "DepartmentId"))
        if not isinstance(self.organization_id, OrganizationId):
            raise InvalidIdentifierError(
                "DepartmentId requires an OrganizationId owner",
                identifier_type="DepartmentId",
            )
        if self.parent is not None:
            if not isinstance(self.parent, DepartmentId):
                raise InvalidIdentifierError(
                    "Parent of a DepartmentId must be a DepartmentId",
                    identifier_type="DepartmentId",
                )
            if not self.parent.belongs_to(self.organization_id):
                raise InvalidIdentifierError(
                    f"Parent department {self.parent.value} belongs to organization "
                    f"{self.parent.organization_id.value}, not {self.organization_id.value}",
                    identifier_type="DepartmentId",
                    value=self.value,
                )
            if self.parent.value == self.value:
                raise InvalidIdentifierError(
                    "A department cannot be its own parent",
                    identifier_type="DepartmentId",
                    value=self.value,
                )

    @classmethod
    def generate(
        cls, organization_id: OrganizationId, parent: Optional["DepartmentId"] = None
    ) -> "DepartmentId":
        return cls(generate_uuid_v7(), organization_id, parent)

    @classmethod
    def from_string(
        cls,
        value: str,
        organization_id: OrganizationId,
        parent: Optional["DepartmentId"] = None,
    ) -> "DepartmentId":
        return cls(value, organization_id, parent)

    @property
    def tenant_id(self) -> TenantId:
        return self.organization_id.tenant_id

    def is_valid(self) -> bool:
        return validate_uuid(self.value, "DepartmentId").is_valid and self.organization_id.is_valid()

    def equals(self, other: Optional["DepartmentId"]) -> bool:
        return isinstance(other, DepartmentId) and self == other

    def clone(self) -> "DepartmentId":
        return DepartmentId(self.value, self.organization_id, self.parent)

    def belongs_to(self, organization_id: OrganizationId) -> bool:
        """Check whether this department is owned by the given organization."""
        return self.organization_id == organization_id

    def ancestors(self) -> Iterator["DepartmentId"]:
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_ancestor_of(self, other: Optional["DepartmentId"]) -> bool:
        if other is None:
            return False
        return any(ancestor == self for ancestor in other.ancestors())

    def is_descendant_of(self, other: Optional["DepartmentId"]) -> bool:
        if other is None:
            return False
        return other.is_ancestor_of(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "organization_id": self.organization_id.to_dict(),
            "parent": self.parent.to_dict() if self.parent else None,
        }

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EntityId:
    """Identifier of a stored, tenant-isolated entity."""
    value: str

    def __post_init__(self):
        object.__setattr__(self, "value", _checked_value(self.value, "EntityId"))

    @classmethod
    def generate(cls) -> "EntityId":
        return cls(generate_uuid_v7())

    @classmethod
    def from_string(cls, value: str) -> "EntityId":
        return cls(value)

    def is_valid(self) -> bool:
        return validate_uuid(self.value, "EntityId").is_valid

    def equals(self, other: Optional["EntityId"]) -> bool:
        return isinstance(other, EntityId) and self.value == other.value

    def clone(self) -> "EntityId":
        return EntityId(self.value)

    def __str__(self) -> str:
        return self.value
