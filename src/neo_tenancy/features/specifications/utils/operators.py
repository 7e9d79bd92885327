"""In-memory evaluation of query operators."""

from collections.abc import Mapping
from typing import Any

from ..entities.criteria import QueryOperator

_MISSING = object()


def resolve_field(record: Any, path: str) -> Any:
    """Resolve a dotted field path against a mapping or an object.

    Identifier value objects are unwrapped to their string value so records can
    be compared against the plain values used in where trees.
    """
    current = record
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        else:
            current = getattr(current, part, _MISSING)
        if current is _MISSING:
            return None
    return unwrap(current)


def unwrap(value: Any) -> Any:
    # TenantId, OrganizationId, DepartmentId and EntityId all expose .value
    if hasattr(value, "value") and hasattr(value, "is_valid"):
        return value.value
    return value


def matches(operator: QueryOperator, actual: Any, expected: Any) -> bool:
    """Apply a single operator. Comparisons against None never match."""
    expected = unwrap(expected)

    if operator == QueryOperator.IS_NULL:
        return actual is None
    if operator == QueryOperator.IS_NOT_NULL:
        return actual is not None
    if operator == QueryOperator.EQUALS:
        return actual == expected
    if operator == QueryOperator.NOT_EQUALS:
        return actual != expected
    if operator == QueryOperator.IN:
        return actual in [unwrap(v) for v in expected]
    if operator == QueryOperator.NOT_IN:
        return actual not in [unwrap(v) for v in expected]

    if actual is None:
        return False

    try:
        if operator == QueryOperator.GREATER_THAN:
            return actual > expected
        if operator == QueryOperator.GREATER_THAN_OR_EQUAL:
            return actual >= expected
        if operator == QueryOperator.LESS_THAN:
            return actual < expected
        if operator == QueryOperator.LESS_THAN_OR_EQUAL:
            return actual <= expected
        if operator == QueryOperator.BETWEEN:
            low, high = expected
            return low <= actual <= high
    except TypeError:
        return False

    if operator == QueryOperator.CONTAINS:
        return str(expected) in str(actual) if isinstance(actual, str) else expected in actual
    if operator == QueryOperator.NOT_CONTAINS:
        return str(expected) not in str(actual) if isinstance(actual, str) else expected not in actual
    if operator == QueryOperator.STARTS_WITH:
        return str(actual).startswith(str(expected))
    if operator == QueryOperator.ENDS_WITH:
        return str(actual).endswith(str(expected))

    raise ValueError(f"Unsupported operator: {operator}")
