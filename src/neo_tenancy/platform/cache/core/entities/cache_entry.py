"""Cache entry entity.

Timestamps are readings of the cache's monotonic clock in seconds, so expiry
is unaffected by wall-clock adjustments.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional


@dataclass
class CacheEntry:
    """A cached value with TTL, tags and access tracking.

    ``ttl_ms`` of 0 means the entry never expires.
    """

    key: str
    value: Any
    inserted_at: float
    ttl_ms: int = 0
    tags: FrozenSet[str] = field(default_factory=frozenset)
    last_accessed_at: float = 0.0
    access_count: int = 0
    sequence: int = field(default=0, compare=False)

    def __post_init__(self):
        if not self.last_accessed_at:
            self.last_accessed_at = self.inserted_at
        self.tags = frozenset(self.tags)

    @property
    def expires_at(self) -> Optional[float]:
        if self.ttl_ms <= 0:
            return None
        return self.inserted_at + self.ttl_ms / 1000.0

    def is_expired(self, now: float) -> bool:
        expires_at = self.expires_at
        return expires_at is not None and now >= expires_at

    def touch(self, now: float) -> None:
        """Update access timestamp and increment access count."""
        self.last_accessed_at = now
        self.access_count += 1
