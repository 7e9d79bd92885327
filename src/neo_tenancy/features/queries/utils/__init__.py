"""Query utilities."""

from .tenant_filter import (
    TENANT_FILTER_NAME,
    build_tenant_filter_args,
    build_tenant_filter_options,
    tenant_filter_condition,
)
from .where import evaluate_where

__all__ = [
    "TENANT_FILTER_NAME",
    "build_tenant_filter_args",
    "build_tenant_filter_options",
    "tenant_filter_condition",
    "evaluate_where",
]
