"""Cache protocol.

Storage contract used by the cached repository decorator and by collaborators
that invalidate entries out of band (bulk imports and the like).
"""

from typing import Any, Iterable, Optional, Protocol, Union, runtime_checkable

from ..entities.cache_entry import CacheEntry
from ..entities.cache_stats import CacheStats
from ..value_objects.invalidation_pattern import InvalidationPattern


@runtime_checkable
class Cache(Protocol):
    """Asynchronous, tag-aware key/value cache.

    Implementations must make every operation atomic with respect to the
    others: a ``set`` is never observed half done by a concurrent ``get``.
    Failures of the cache itself are raised as ``CacheBackendError``.
    """

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Get an entry, or None on a miss.

        An entry whose TTL has elapsed at read time is a miss and is removed.
        Returning the entry rather than the bare value lets callers cache
        None as a legitimate result.
        """
        ...

    async def set(
        self,
        key: str,
        value: Any,
        ttl_ms: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        """Store a value. ``ttl_ms`` None uses the default TTL, 0 never expires."""
        ...

    async def delete(self, key: str) -> bool:
        ...

    async def invalidate_by_tag(self, tag: str) -> int:
        """Remove every entry carrying the tag; returns the number removed."""
        ...

    async def invalidate_by_tags(self, tags: Iterable[str]) -> int:
        ...

    async def invalidate_by_pattern(self, pattern: Union[str, InvalidationPattern]) -> int:
        """Remove every entry whose key matches a glob string or pattern object."""
        ...

    async def get_stats(self) -> CacheStats:
        ...

    async def clear(self) -> None:
        ...
