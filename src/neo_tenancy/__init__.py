"""Neo-Tenancy - tenant-isolated query and cache layer.

This library sits between business repositories and physical storage. It
scopes every read and write to the caller's tenant, organization and
department, translates composable specifications into backend-agnostic
queries with the tenant filter always injected, and caches repository results
without ever leaking entries across tenants.
"""

from .__version__ import __version__

from .core.exceptions import (
    # Base Exception
    NeoTenancyError,
    create_error_response,

    # Domain Exceptions
    InvalidIdentifierError,
    InvalidTenantContextError,
    IsolationViolationError,
    CrossTenantAccessDeniedError,
    TenantContextMissingError,
    SpecificationConversionError,

    # Repository Exceptions
    RepositoryError,
    RepositoryOperationFailedError,
    ConcurrencyConflictError,

    # Infrastructure Exceptions
    CacheBackendError,
    CacheConfigurationError,
    CacheKeyError,
)

from .core.value_objects import (
    TenantId,
    OrganizationId,
    DepartmentId,
    EntityId,
    ValidationResult,
    validate_uuid,
)

from .core.context import (
    CROSS_TENANT_PERMISSION,
    TenantContext,
    bind_tenant_context,
    get_current_tenant_context,
)

from .features.specifications import (
    Specification,
    AndSpecification,
    OrSpecification,
    NotSpecification,
    PredicateSpecification,
    FieldSpecification,
    CriteriaSpecification,
    QueryOperator,
    SortDirection,
    QueryCondition,
    SortCriteria,
    PaginationCriteria,
    QueryCriteria,
    QueryCriteriaBuilder,
)

from .features.queries import (
    QueryOptions,
    PaginatedResult,
    SpecificationConverter,
    QueryBuilder,
    evaluate_where,
)

from .features.repositories import (
    TenantIsolatedEntity,
    EntityStore,
    TenantIsolatedRepository,
    InMemoryEntityStore,
    BaseTenantIsolatedRepository,
    CachedRepository,
    create_cached_repository,
)

from .platform.cache import (
    Cache,
    CacheEntry,
    CacheStats,
    EvictionStrategy,
    InvalidationPattern,
    InMemoryCache,
    GLOBAL_TENANT_SENTINEL,
)

from .config import CacheSettings, get_cache_settings, setup_logging

__all__ = [
    "__version__",
    # Exceptions
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
    # Identifiers
    "TenantId",
    "OrganizationId",
    "DepartmentId",
    "EntityId",
    "ValidationResult",
    "validate_uuid",
    # Context
    "CROSS_TENANT_PERMISSION",
    "TenantContext",
    "bind_tenant_context",
    "get_current_tenant_context",
    # Specifications
    "Specification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "PredicateSpecification",
    "FieldSpecification",
    "CriteriaSpecification",
    "QueryOperator",
    "SortDirection",
    "QueryCondition",
    "SortCriteria",
    "PaginationCriteria",
    "QueryCriteria",
    "QueryCriteriaBuilder",
    # Queries
    "QueryOptions",
    "PaginatedResult",
    "SpecificationConverter",
    "QueryBuilder",
    "evaluate_where",
    # Repositories
    "TenantIsolatedEntity",
    "EntityStore",
    "TenantIsolatedRepository",
    "InMemoryEntityStore",
    "BaseTenantIsolatedRepository",
    "CachedRepository",
    "create_cached_repository",
    # Cache
    "Cache",
    "CacheEntry",
    "CacheStats",
    "EvictionStrategy",
    "InvalidationPattern",
    "InMemoryCache",
    "GLOBAL_TENANT_SENTINEL",
    # Config
    "CacheSettings",
    "get_cache_settings",
    "setup_logging",
]
