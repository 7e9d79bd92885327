"""Tenant filter construction.

Three tiers: tenant_id equality is always present; organization_id and
department_id equality are added only when the context carries them.
"""

from typing import Any, Dict

from ....core.context import TenantContext

TENANT_FILTER_NAME = "tenant"


def build_tenant_filter_args(context: TenantContext) -> Dict[str, str]:
    args = {"tenant_id": context.tenant_id.value}
    if context.organization_id is not None:
        args["organization_id"] = context.organization_id.value
    if context.department_id is not None:
        args["department_id"] = context.department_id.value
    return args


def tenant_filter_condition(args: Dict[str, str]) -> Dict[str, Any]:
    """Where-tree clause for the given filter args."""
    return {name: {"$eq": value} for name, value in args.items()}


def build_tenant_filter_options(context: TenantContext) -> Dict[str, Dict[str, Dict[str, str]]]:
    return {"filters": {TENANT_FILTER_NAME: build_tenant_filter_args(context)}}
