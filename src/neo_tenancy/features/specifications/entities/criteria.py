"""Query criteria entities and enums.

Criteria are a declarative, backend-agnostic description of filter, sort and
page conditions. They are immutable; the builder produces new instances.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Optional, Tuple


class QueryOperator(str, Enum):
    """Comparison operator of a single field condition."""
    EQUALS = "eq"
    NOT_EQUALS = "ne"
    GREATER_THAN = "gt"
    GREATER_THAN_OR_EQUAL = "gte"
    LESS_THAN = "lt"
    LESS_THAN_OR_EQUAL = "lte"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IN = "in"
    NOT_IN = "nin"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"
    BETWEEN = "between"

    @property
    def token(self) -> str:
        """Key used in the where tree, e.g. ``$eq``."""
        return f"${self.value}"

    @classmethod
    def from_token(cls, token: str) -> "QueryOperator":
        return cls(token[1:] if token.startswith("$") else token)


class SortDirection(str, Enum):
    """Sort order enumeration."""
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class QueryCondition:
    """Single field condition."""

    field: str
    operator: QueryOperator
    value: Any = None

    def __post_init__(self):
        if not self.field or not self.field.replace("_", "").replace(".", "").isalnum():
            raise ValueError(f"Invalid field name: {self.field}")
        if not isinstance(self.operator, QueryOperator):
            object.__setattr__(self, "operator", QueryOperator(self.operator))
        if self.operator == QueryOperator.BETWEEN:
            if not isinstance(self.value, (list, tuple)) or len(self.value) != 2:
                raise ValueError("BETWEEN requires a (low, high) pair")
        if self.operator in (QueryOperator.IN, QueryOperator.NOT_IN):
            if not isinstance(self.value, (list, tuple, set, frozenset)):
                raise ValueError(f"{self.operator.name} requires a collection value")


@dataclass(frozen=True)
class SortCriteria:
    """Sort rule for a single field."""

    field: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self):
        if not self.field or not self.field.replace("_", "").replace(".", "").isalnum():
            raise ValueError(f"Invalid field name: {self.field}")
        if not isinstance(self.direction, SortDirection):
            object.__setattr__(self, "direction", SortDirection(str(self.direction).lower()))


@dataclass(frozen=True)
class PaginationCriteria:
    """Offset pagination (page is 1-based)."""

    page: int = 1
    limit: int = 50

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("Page must be >= 1")
        if self.limit < 1 or self.limit > 1000:
            raise ValueError("Limit must be between 1 and 1000")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class QueryCriteria:
    """Ordered conditions combined with AND, plus optional sort, page and projection."""

    conditions: Tuple[QueryCondition, ...] = ()
    sort: Tuple[SortCriteria, ...] = ()
    pagination: Optional[PaginationCriteria] = None
    fields: Optional[Tuple[str, ...]] = None
    distinct: bool = False

    def __post_init__(self):
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "sort", tuple(self.sort))
        if self.fields is not None:
            object.__setattr__(self, "fields", tuple(self.fields))

    def is_empty(self) -> bool:
        return not self.conditions

    def with_condition(self, condition: QueryCondition) -> "QueryCriteria":
        return replace(self, conditions=self.conditions + (condition,))

    def with_pagination(self, pagination: Optional[PaginationCriteria]) -> "QueryCriteria":
        return replace(self, pagination=pagination)

    def with_sort(self, sort: Iterable[SortCriteria]) -> "QueryCriteria":
        return replace(self, sort=tuple(sort))


@dataclass
class QueryCriteriaBuilder:
    """Fluent construction of QueryCriteria.

    Example:
        criteria = (
            QueryCriteriaBuilder()
            .where("status", QueryOperator.EQUALS, "active")
            .order_by("created_at", SortDirection.DESC)
            .paginate(page=2, limit=20)
            .build()
        )
    """

    _conditions: list = field(default_factory=list)
    _sort: list = field(default_factory=list)
    _pagination: Optional[PaginationCriteria] = None
    _fields: Optional[Tuple[str, ...]] = None
    _distinct: bool = False

    def where(self, field_name: str, operator: QueryOperator, value: Any = None) -> "QueryCriteriaBuilder":
        self._conditions.append(QueryCondition(field_name, operator, value))
        return self

    def equals(self, field_name: str, value: Any) -> "QueryCriteriaBuilder":
        return self.where(field_name, QueryOperator.EQUALS, value)

    def order_by(self, field_name: str, direction: SortDirection = SortDirection.ASC) -> "QueryCriteriaBuilder":
        self._sort.append(SortCriteria(field_name, direction))
        return self

    def paginate(self, page: int = 1, limit: int = 50) -> "QueryCriteriaBuilder":
        self._pagination = PaginationCriteria(page=page, limit=limit)
        return self

    def select(self, *field_names: str) -> "QueryCriteriaBuilder":
        self._fields = tuple(field_names)
        return self

    def distinct(self, value: bool = True) -> "QueryCriteriaBuilder":
        self._distinct = value
        return self

    def build(self) -> QueryCriteria:
        return QueryCriteria(
            conditions=tuple(self._conditions),
            sort=tuple(self._sort),
            pagination=self._pagination,
            fields=self._fields,
            distinct=self._distinct,
        )
