"""Value objects module for neo-tenancy.

This module provides the immutable hierarchical identifiers and the plain
validation functions they are checked with at construction time.
"""

from .identifiers import (
    TenantId,
    OrganizationId,
    DepartmentId,
    EntityId,
)

from .validation import (
    ValidationResult,
    ValidationRule,
    not_empty,
    uuid_format,
    run_rules,
    validate_uuid,
)

__all__ = [
    # Identifiers
    "TenantId",
    "OrganizationId",
    "DepartmentId",
    "EntityId",
    # Validation
    "ValidationResult",
    "ValidationRule",
    "not_empty",
    "uuid_format",
    "run_rules",
    "validate_uuid",
]
