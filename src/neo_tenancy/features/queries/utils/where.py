"""In-memory evaluation of where trees."""

from typing import Any, Mapping, Optional

from ...specifications.entities.criteria import QueryOperator
from ...specifications.utils.operators import matches, resolve_field


def evaluate_where(where: Optional[Mapping[str, Any]], record: Any) -> bool:
    """Evaluate a where tree against a mapping or an object.

    Sibling keys of one node are combined with AND. A field whose value is not
    an operator mapping is compared for equality.
    """
    if not where:
        return True

    for key, value in where.items():
        if key == "$and":
            if not all(evaluate_where(child, record) for child in value):
                return False
        elif key == "$or":
            if not any(evaluate_where(child, record) for child in value):
                return False
        elif key == "$not":
            if evaluate_where(value, record):
                return False
        else:
            actual = resolve_field(record, key)
            if isinstance(value, Mapping) and value and all(
                isinstance(token, str) and token.startswith("$") for token in value
            ):
                for token, expected in value.items():
                    if not matches(QueryOperator.from_token(token), actual, expected):
                        return False
            elif not matches(QueryOperator.EQUALS, actual, value):
                return False
    return True
