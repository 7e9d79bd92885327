"""Cache key and tag construction for repository results.

Key layout: ``[{prefix}:]{tenant}:repo:{entity}:{operation}:{args_hash}``.
The tenant discriminator is mandatory, so two tenants asking for the same
logical id never share an entry.
"""

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from ....core.exceptions import CacheKeyError

GLOBAL_TENANT_SENTINEL = "global"
ARGS_HASH_LENGTH = 16


def _json_default(value: Any) -> Any:
    if hasattr(value, "value") and hasattr(value, "is_valid"):
        return value.value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)


def canonical_json(value: Any) -> str:
    """Deterministic JSON: sorted keys, no whitespace."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=_json_default)


def hash_args(args: Any) -> str:
    """First 16 hex characters of the SHA-256 of the canonical JSON form."""
    digest = hashlib.sha256(canonical_json(args).encode("utf-8")).hexdigest()
    return digest[:ARGS_HASH_LENGTH]


class CacheKeyBuilder:
    """Builds repository cache keys, tags and invalidation patterns."""

    def __init__(self, key_prefix: Optional[str] = None):
        self.key_prefix = key_prefix.rstrip(":") if key_prefix else None

    def _prefixed(self, value: str) -> str:
        return f"{self.key_prefix}:{value}" if self.key_prefix else value

    @staticmethod
    def _discriminator(tenant: Optional[str]) -> str:
        if tenant is None:
            return GLOBAL_TENANT_SENTINEL
        tenant = str(tenant)
        if not tenant.strip():
            raise CacheKeyError("Tenant discriminator cannot be empty when provided")
        return tenant

    def repository_key(
        self,
        tenant: Optional[str],
        entity_name: str,
        operation: str,
        args: Any,
    ) -> str:
        if not entity_name or not operation:
            raise CacheKeyError("Entity name and operation cannot be empty")
        return self._prefixed(
            f"{self._discriminator(tenant)}:repo:{entity_name}:{operation}:{hash_args(args)}"
        )

    def entity_tag(self, tenant: Optional[str], entity_name: str) -> str:
        return self._prefixed(f"{self._discriminator(tenant)}:entity:{entity_name}")

    def entity_id_tag(self, tenant: Optional[str], entity_name: str, entity_id: Any) -> str:
        entity_id = _json_default(entity_id) if not isinstance(entity_id, str) else entity_id
        return f"{self.entity_tag(tenant, entity_name)}:{entity_id}"

    def entity_pattern(self, tenant: Optional[str], entity_name: str) -> str:
        """Glob matching every repository key of one entity type under a tenant."""
        return self._prefixed(f"{self._discriminator(tenant)}:repo:{entity_name}:*")
