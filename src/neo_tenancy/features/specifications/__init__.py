"""Specification feature for neo-tenancy.

Composable predicates plus the declarative query criteria they translate to.
"""

from .base import (
    Specification,
    AndSpecification,
    OrSpecification,
    NotSpecification,
    PredicateSpecification,
    get_nesting_depth,
)
from .field import FieldSpecification, CriteriaSpecification
from .entities import (
    QueryOperator,
    SortDirection,
    QueryCondition,
    SortCriteria,
    PaginationCriteria,
    QueryCriteria,
    QueryCriteriaBuilder,
)

__all__ = [
    # Specifications
    "Specification",
    "AndSpecification",
    "OrSpecification",
    "NotSpecification",
    "PredicateSpecification",
    "FieldSpecification",
    "CriteriaSpecification",
    "get_nesting_depth",
    # Criteria
    "QueryOperator",
    "SortDirection",
    "QueryCondition",
    "SortCriteria",
    "PaginationCriteria",
    "QueryCriteria",
    "QueryCriteriaBuilder",
]
