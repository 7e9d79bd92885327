"""Query feature for neo-tenancy.

Converts specifications and criteria into backend-agnostic query options and
injects the tenant filter whenever a tenant context is present.
"""

from ..specifications.entities import (
    QueryOperator,
    SortDirection,
    QueryCondition,
    SortCriteria,
    PaginationCriteria,
    QueryCriteria,
    QueryCriteriaBuilder,
)
from .entities import QueryOptions, PaginatedResult
from .services import (
    MAX_NESTING_DEPTH,
    SpecificationConverter,
    QueryBuilder,
    merge_with_tenant_filter,
)
from .utils import (
    TENANT_FILTER_NAME,
    build_tenant_filter_args,
    build_tenant_filter_options,
    tenant_filter_condition,
    evaluate_where,
)

__all__ = [
    # Criteria
    "QueryOperator",
    "SortDirection",
    "QueryCondition",
    "SortCriteria",
    "PaginationCriteria",
    "QueryCriteria",
    "QueryCriteriaBuilder",
    # Entities
    "QueryOptions",
    "PaginatedResult",
    # Services
    "MAX_NESTING_DEPTH",
    "SpecificationConverter",
    "QueryBuilder",
    "merge_with_tenant_filter",
    # Utils
    "TENANT_FILTER_NAME",
    "build_tenant_filter_args",
    "build_tenant_filter_options",
    "tenant_filter_condition",
    "evaluate_where",
]
