"""Domain-specific exceptions for neo-tenancy.

Covers identifier construction, tenant context validation, tenant isolation
violations and specification handling.
"""

from typing import Any, Dict, List, Optional

from .base import NeoTenancyError


# Validation Errors
class InvalidIdentifierError(NeoTenancyError, ValueError):
    """Raised when an identifier is malformed or breaks the hierarchy invariant."""
    
    def __init__(self, message: str, identifier_type: str, value: Any = None):
        self.identifier_type = identifier_type
        details = {"identifier_type": identifier_type}
        if value is not None:
            details["value"] = str(value)
        super().__init__(message, error_code="INVALID_IDENTIFIER", details=details)


class InvalidTenantContextError(NeoTenancyError, ValueError):
    """Raised when a tenant context fails validation."""
    
    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(
            f"Invalid tenant context: {'; '.join(self.errors)}",
            error_code="INVALID_TENANT_CONTEXT",
            details={"errors": self.errors},
        )


# Isolation Errors
class IsolationViolationError(NeoTenancyError):
    """Raised when a cross-scope access is attempted without the required flag or permission.
    
    Never downgraded to an empty result: callers must be able to tell a
    refused access apart from a missing entity.
    """
    
    def __init__(
        self,
        message: str,
        scope: str,
        operation: Optional[str] = None,
        error_code: str = "ISOLATION_VIOLATION",
        details: Optional[Dict[str, Any]] = None,
    ):
        self.scope = scope
        self.operation = operation
        payload = {"scope": scope}
        if operation:
            payload["operation"] = operation
        if details:
            payload.update(details)
        super().__init__(message, error_code=error_code, details=payload)


class CrossTenantAccessDeniedError(IsolationViolationError):
    """Raised when a cross-tenant operation is used without an authorized context."""
    
    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Cross-tenant access denied for '{operation}': {reason}",
            scope="cross_tenant",
            operation=operation,
            error_code="CROSS_TENANT_ACCESS_DENIED",
            details={"reason": reason},
        )


class TenantContextMissingError(IsolationViolationError):
    """Raised when a scoped operation runs without a bound tenant context."""
    
    def __init__(self, operation: str):
        super().__init__(
            f"Operation '{operation}' requires a tenant context",
            scope="tenant",
            operation=operation,
            error_code="TENANT_CONTEXT_MISSING",
        )


# Specification Errors
class SpecificationConversionError(NeoTenancyError, ValueError):
    """Raised when a specification cannot be translated into query options."""
    
    def __init__(self, message: str, specification: Optional[str] = None):
        details = {"specification": specification} if specification else {}
        super().__init__(message, error_code="SPECIFICATION_CONVERSION_FAILED", details=details)
