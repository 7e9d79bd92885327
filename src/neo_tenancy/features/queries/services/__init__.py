"""Query services."""

from .specification_converter import (
    MAX_NESTING_DEPTH,
    SpecificationConverter,
    condition_to_where,
    conditions_to_where,
)
from .query_builder import QueryBuilder, merge_with_tenant_filter

__all__ = [
    "MAX_NESTING_DEPTH",
    "SpecificationConverter",
    "condition_to_where",
    "conditions_to_where",
    "QueryBuilder",
    "merge_with_tenant_filter",
]
