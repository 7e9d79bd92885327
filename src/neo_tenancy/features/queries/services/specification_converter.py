"""Translate specifications and criteria into backend-agnostic query options."""

import logging
from typing import Any, Dict, List, Optional

from ....core.exceptions import SpecificationConversionError
from ...specifications.base import (
    AndSpecification,
    NotSpecification,
    OrSpecification,
    Specification,
    get_nesting_depth,
)
from ...specifications.entities.criteria import QueryCondition, QueryCriteria, QueryOperator
from ...specifications.utils.operators import unwrap
from ..entities.options import QueryOptions

logger = logging.getLogger(__name__)

MAX_NESTING_DEPTH = 5


def condition_to_where(condition: QueryCondition) -> Dict[str, Any]:
    """Leaf node ``{field: {"$op": value}}``."""
    value = condition.value
    if condition.operator in (QueryOperator.IS_NULL, QueryOperator.IS_NOT_NULL):
        value = True
    elif isinstance(value, (list, tuple, set, frozenset)):
        value = [unwrap(item) for item in value]
    else:
        value = unwrap(value)
    return {condition.field: {condition.operator.token: value}}


def conditions_to_where(conditions) -> Optional[Dict[str, Any]]:
    leaves = [condition_to_where(condition) for condition in conditions]
    if not leaves:
        return None
    if len(leaves) == 1:
        return leaves[0]
    return {"$and": leaves}


class SpecificationConverter:
    """Converts specification trees into ``where`` trees.

    Field and criteria specifications are the translatable leaves. AND and OR
    groups of the same kind are flattened. Anything else, including ad-hoc
    predicate specifications, cannot be expressed as a query and is rejected.
    """

    def __init__(self, max_nesting_depth: int = MAX_NESTING_DEPTH):
        self.max_nesting_depth = max_nesting_depth

    def convert_to_query(self, specification: Specification, entity_name: str) -> QueryOptions:
        depth = get_nesting_depth(specification)
        if depth > self.max_nesting_depth:
            raise SpecificationConversionError(
                f"Specification nesting depth {depth} exceeds maximum {self.max_nesting_depth}",
                specification=specification.get_description(),
            )

        if hasattr(specification, "get_query_criteria"):
            return self.convert_criteria_to_query(specification.get_query_criteria())

        where = self._convert_node(specification)
        logger.debug("Converted specification for %s: %s", entity_name, specification.get_description())
        return QueryOptions(where=where)

    def convert_criteria_to_query(self, criteria: QueryCriteria) -> QueryOptions:
        pagination = criteria.pagination
        return QueryOptions(
            where=conditions_to_where(criteria.conditions),
            order_by={sort.field: sort.direction.value for sort in criteria.sort},
            limit=pagination.limit if pagination else None,
            offset=pagination.offset if pagination else None,
            fields=criteria.fields,
            distinct=criteria.distinct,
        )

    def _convert_node(self, specification: Specification) -> Optional[Dict[str, Any]]:
        # None means "match everything"
        if isinstance(specification, AndSpecification):
            children = [
                node
                for node in (
                    self._convert_node(specification.left),
                    self._convert_node(specification.right),
                )
                if node is not None
            ]
            if not children:
                return None
            if len(children) == 1:
                return children[0]
            return {"$and": self._flatten("$and", children)}

        if isinstance(specification, OrSpecification):
            left = self._convert_node(specification.left)
            right = self._convert_node(specification.right)
            if left is None or right is None:
                return None
            return {"$or": self._flatten("$or", [left, right])}

        if isinstance(specification, NotSpecification):
            inner = self._convert_node(specification.specification)
            if inner is None:
                raise SpecificationConversionError(
                    "Cannot negate a specification that matches everything",
                    specification=specification.get_description(),
                )
            return {"$not": inner}

        if hasattr(specification, "to_condition"):
            return condition_to_where(specification.to_condition())

        if hasattr(specification, "get_query_criteria"):
            return conditions_to_where(specification.get_query_criteria().conditions)

        raise SpecificationConversionError(
            f"Specification {specification.__class__.__name__} has no query translation",
            specification=specification.get_description(),
        )

    @staticmethod
    def _flatten(operator: str, nodes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        flattened = []
        for node in nodes:
            if len(node) == 1 and operator in node:
                flattened.extend(node[operator])
            else:
                flattened.append(node)
        return flattened
