"""Query criteria entities."""

from .criteria import (
    QueryOperator,
    SortDirection,
    QueryCondition,
    SortCriteria,
    PaginationCriteria,
    QueryCriteria,
    QueryCriteriaBuilder,
)

__all__ = [
    "QueryOperator",
    "SortDirection",
    "QueryCondition",
    "SortCriteria",
    "PaginationCriteria",
    "QueryCriteria",
    "QueryCriteriaBuilder",
]
