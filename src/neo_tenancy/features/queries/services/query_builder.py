"""Query builder with mandatory tenant filter injection.

When a tenant context is supplied the tenant filter is always ANDed with the
predicate produced from the specification or criteria. There is no way to
omit it through this entry point; unscoped reads go through the repository's
explicit cross-tenant operation instead.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional

from ....core.context import TenantContext
from ...specifications.base import Specification
from ...specifications.entities.criteria import QueryCriteria
from ..entities.options import QueryOptions
from ..utils.tenant_filter import (
    TENANT_FILTER_NAME,
    build_tenant_filter_args,
    tenant_filter_condition,
)
from .specification_converter import SpecificationConverter

logger = logging.getLogger(__name__)


def merge_with_tenant_filter(
    where: Optional[Dict[str, Any]], tenant_filter: Dict[str, Any]
) -> Dict[str, Any]:
    if where:
        return {"$and": [where, tenant_filter]}
    return tenant_filter


class QueryBuilder:
    """Builds QueryOptions from specifications or criteria."""

    def __init__(self, converter: Optional[SpecificationConverter] = None):
        self.converter = converter or SpecificationConverter()

    def build_from_specification(
        self,
        specification: Specification,
        entity_name: str,
        tenant_context: Optional[TenantContext] = None,
    ) -> QueryOptions:
        options = self.converter.convert_to_query(specification, entity_name)
        return self._apply_tenant_filter(options, tenant_context)

    def build_from_criteria(
        self,
        criteria: QueryCriteria,
        tenant_context: Optional[TenantContext] = None,
    ) -> QueryOptions:
        options = self.converter.convert_criteria_to_query(criteria)
        return self._apply_tenant_filter(options, tenant_context)

    def build_for_context(self, tenant_context: TenantContext) -> QueryOptions:
        """Options that select everything visible to the context."""
        return self._apply_tenant_filter(QueryOptions(), tenant_context)

    def _apply_tenant_filter(
        self, options: QueryOptions, tenant_context: Optional[TenantContext]
    ) -> QueryOptions:
        if tenant_context is None:
            return options

        args = build_tenant_filter_args(tenant_context)
        filters = dict(options.filters)
        filters[TENANT_FILTER_NAME] = args
        logger.debug("Injected tenant filter for tenant %s", args["tenant_id"])
        return replace(
            options,
            where=merge_with_tenant_filter(options.where, tenant_filter_condition(args)),
            filters=filters,
        )
