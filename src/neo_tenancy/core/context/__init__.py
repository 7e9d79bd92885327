"""Tenant context for neo-tenancy."""

from .tenant_context import (
    CROSS_TENANT_PERMISSION,
    TenantContext,
    bind_tenant_context,
    get_current_tenant_context,
    tenant_context_var,
)

__all__ = [
    "CROSS_TENANT_PERMISSION",
    "TenantContext",
    "bind_tenant_context",
    "get_current_tenant_context",
    "tenant_context_var",
]
