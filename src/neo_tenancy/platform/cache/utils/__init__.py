"""Cache utilities."""

from .key_builder import (
    GLOBAL_TENANT_SENTINEL,
    CacheKeyBuilder,
    canonical_json,
    hash_args,
)

__all__ = [
    "GLOBAL_TENANT_SENTINEL",
    "CacheKeyBuilder",
    "canonical_json",
    "hash_args",
]
