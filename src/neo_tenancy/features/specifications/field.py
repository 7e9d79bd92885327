"""Specifications that are both evaluable in memory and translatable to a query."""

from typing import Any, Generic, Tuple, TypeVar

from .base import Specification
from .entities.criteria import QueryCondition, QueryCriteria, QueryOperator
from .utils.operators import matches, resolve_field

T = TypeVar("T")


class FieldSpecification(Specification[T], Generic[T]):
    """Single ``field <operator> value`` condition.

    Example:
        active = FieldSpecification("status", QueryOperator.EQUALS, "active")
        adults = FieldSpecification("age", QueryOperator.GREATER_THAN_OR_EQUAL, 18)
        spec = active & adults
    """

    def __init__(self, field: str, operator: QueryOperator, value: Any = None):
        self.condition = QueryCondition(field, operator, value)

    @classmethod
    def equals(cls, field: str, value: Any) -> "FieldSpecification[T]":
        return cls(field, QueryOperator.EQUALS, value)

    @property
    def field(self) -> str:
        return self.condition.field

    @property
    def operator(self) -> QueryOperator:
        return self.condition.operator

    @property
    def value(self) -> Any:
        return self.condition.value

    def is_satisfied_by(self, candidate: T) -> bool:
        return matches(self.operator, resolve_field(candidate, self.field), self.value)

    def to_condition(self) -> QueryCondition:
        return self.condition

    def get_description(self) -> str:
        if self.operator in (QueryOperator.IS_NULL, QueryOperator.IS_NOT_NULL):
            return f"{self.field} {self.operator.name}"
        return f"{self.field} {self.operator.name} {self.value!r}"


class CriteriaSpecification(Specification[T], Generic[T]):
    """Wraps a complete QueryCriteria; all conditions must hold."""

    def __init__(self, criteria: QueryCriteria):
        self.criteria = criteria

    @property
    def conditions(self) -> Tuple[QueryCondition, ...]:
        return self.criteria.conditions

    def is_satisfied_by(self, candidate: T) -> bool:
        return all(
            matches(condition.operator, resolve_field(candidate, condition.field), condition.value)
            for condition in self.criteria.conditions
        )

    def get_query_criteria(self) -> QueryCriteria:
        return self.criteria

    def get_description(self) -> str:
        if not self.criteria.conditions:
            return "ALL"
        return " AND ".join(
            f"{c.field} {c.operator.name} {c.value!r}" for c in self.criteria.conditions
        )
