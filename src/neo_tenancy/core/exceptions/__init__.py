"""Exceptions module for neo-tenancy.

This module provides the complete exception hierarchy for neo-tenancy,
organized by domain concerns, repository concerns and infrastructure concerns.
"""

from .base import NeoTenancyError, create_error_response

from .domain import (
    # Validation Errors
    InvalidIdentifierError,
    InvalidTenantContextError,
    
    # Isolation Errors
    IsolationViolationError,
    CrossTenantAccessDeniedError,
    TenantContextMissingError,
    
    # Specification Errors
    SpecificationConversionError,
)

from .repository import (
    RepositoryError,
    RepositoryOperationFailedError,
    ConcurrencyConflictError,
)

from .infrastructure import (
    CacheBackendError,
    CacheConfigurationError,
    CacheKeyError,
)

__all__ = [
    "NeoTenancyError",
    "create_error_response",
    "InvalidIdentifierError",
    "InvalidTenantContextError",
    "IsolationViolationError",
    "CrossTenantAccessDeniedError",
    "TenantContextMissingError",
    "SpecificationConversionError",
    "RepositoryError",
    "RepositoryOperationFailedError",
    "ConcurrencyConflictError",
    "CacheBackendError",
    "CacheConfigurationError",
    "CacheKeyError",
]
