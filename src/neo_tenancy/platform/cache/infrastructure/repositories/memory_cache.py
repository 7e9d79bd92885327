"""In-memory cache.

Single-process implementation of the Cache protocol: one key to entry map
kept in recency order, a tag to key-set index, passive expiry on read and a
background sweep task owned by the instance.
"""

import asyncio
import contextlib
import logging
import time
from collections import OrderedDict, defaultdict
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Union

from .....core.exceptions import CacheBackendError, CacheConfigurationError, CacheKeyError
from ...application.services.stats_collector import CacheStatsCollector
from ...core.entities.cache_entry import CacheEntry
from ...core.entities.cache_stats import CacheStats
from ...core.value_objects.eviction_strategy import EvictionStrategy
from ...core.value_objects.invalidation_pattern import InvalidationPattern

logger = logging.getLogger(__name__)


class InMemoryCache:
    """Async-safe in-memory cache.

    All state lives behind one ``asyncio.Lock``. Critical sections never await
    anything else, so concurrent callers for different keys only wait for
    short dictionary operations.

    Example:
        async with InMemoryCache(max_size=500, default_ttl_ms=30_000) as cache:
            await cache.set("t1:repo:user:find_by_id:ab12", user, tags=["t1:entity:user"])
            entry = await cache.get("t1:repo:user:find_by_id:ab12")
    """

    def __init__(
        self,
        max_size: int = 1000,
        default_ttl_ms: int = 60_000,
        eviction_strategy: Union[EvictionStrategy, str] = EvictionStrategy.LRU,
        cleanup_interval_ms: int = 60_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size < 1:
            raise CacheConfigurationError(
                f"max_size must be >= 1, got {max_size}",
                details={"max_size": max_size},
            )
        if default_ttl_ms < 0:
            raise CacheConfigurationError(
                f"default_ttl_ms must be >= 0, got {default_ttl_ms}",
                details={"default_ttl_ms": default_ttl_ms},
            )
        if cleanup_interval_ms < 0:
            raise CacheConfigurationError(
                f"cleanup_interval_ms must be >= 0, got {cleanup_interval_ms}",
                details={"cleanup_interval_ms": cleanup_interval_ms},
            )
        try:
            strategy = EvictionStrategy.parse(eviction_strategy)
        except ValueError:
            raise CacheConfigurationError(
                f"Unknown eviction strategy: {eviction_strategy}",
                details={"eviction_strategy": str(eviction_strategy)},
            )

        self.max_size = max_size
        self.default_ttl_ms = default_ttl_ms
        self.eviction_strategy = strategy
        self.cleanup_interval_ms = cleanup_interval_ms
        self._clock = clock

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._tag_index: Dict[str, Set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()
        self._stats = CacheStatsCollector(max_size)
        self._sequence = 0
        self._sweep_task: Optional[asyncio.Task] = None
        self._closed = False

        logger.debug(
            "InMemoryCache initialized: max_size=%s default_ttl_ms=%s strategy=%s",
            max_size, default_ttl_ms, strategy.value,
        )

    @classmethod
    def from_settings(cls, settings) -> "InMemoryCache":
        """Build from a CacheSettings-like object."""
        return cls(
            max_size=settings.max_size,
            default_ttl_ms=settings.default_ttl_ms,
            eviction_strategy=settings.eviction_strategy,
            cleanup_interval_ms=settings.cleanup_interval_ms,
        )

    # Lifecycle

    async def start(self) -> None:
        """Start the background sweep. Requires a running event loop."""
        self._closed = False
        self._ensure_sweeper()

    async def close(self) -> None:
        """Stop the background sweep. Entries are kept."""
        self._closed = True
        task, self._sweep_task = self._sweep_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.debug("InMemoryCache sweep stopped")

    async def __aenter__(self) -> "InMemoryCache":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def is_sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def _ensure_sweeper(self) -> None:
        if self._closed or self.cleanup_interval_ms <= 0 or self.is_sweeping:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._sweep_task = loop.create_task(self._sweep_loop())

    async def _sweep_loop(self) -> None:
        interval = self.cleanup_interval_ms / 1000.0
        while True:
            await asyncio.sleep(interval)
            try:
                await self.cleanup_expired()
            except Exception as e:
                logger.error("Expired entry sweep failed: %s", e)

    # Operations

    async def get(self, key: str) -> Optional[CacheEntry]:
        self._check_key(key)
        async with self._lock:
            try:
                entry = self._entries.get(key)
                if entry is None:
                    self._stats.record_miss()
                    logger.debug("Cache miss: %s", key)
                    return None

                now = self._clock()
                if entry.is_expired(now):
                    self._remove(key)
                    self._stats.record_cleanup()
                    self._stats.record_miss()
                    logger.debug("Cache entry expired: %s", key)
                    return None

                entry.touch(now)
                self._entries.move_to_end(key)
                self._stats.record_hit()
                logger.debug("Cache hit: %s", key)
                return replace(entry)
            except CacheBackendError:
                raise
            except Exception as e:
                raise CacheBackendError(f"Cache get failed for key '{key}': {e}") from e

    async def set(
        self,
        key: str,
        value: Any,
        ttl_ms: Optional[int] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> None:
        self._check_key(key)
        effective_ttl = self.default_ttl_ms if ttl_ms is None else ttl_ms
        if effective_ttl < 0:
            raise CacheConfigurationError(
                f"ttl_ms must be >= 0, got {effective_ttl}",
                details={"ttl_ms": effective_ttl},
            )
        tag_set = frozenset(tags or ())

        async with self._lock:
            try:
                if key in self._entries:
                    self._remove(key)
                elif len(self._entries) >= self.max_size:
                    self._evict_one()

                now = self._clock()
                self._sequence += 1
                self._entries[key] = CacheEntry(
                    key=key,
                    value=value,
                    inserted_at=now,
                    ttl_ms=effective_ttl,
                    tags=tag_set,
                    last_accessed_at=now,
                    sequence=self._sequence,
                )
                for tag in tag_set:
                    self._tag_index[tag].add(key)
                self._stats.record_set()
            except CacheBackendError:
                raise
            except Exception as e:
                raise CacheBackendError(f"Cache set failed for key '{key}': {e}") from e

        logger.debug("Cache set: %s (ttl_ms=%s, tags=%s)", key, effective_ttl, len(tag_set))
        self._ensure_sweeper()

    async def delete(self, key: str) -> bool:
        self._check_key(key)
        async with self._lock:
            if key not in self._entries:
                return False
            self._remove(key)
            self._stats.record_delete()
            return True

    async def invalidate_by_tag(self, tag: str) -> int:
        return await self.invalidate_by_tags([tag])

    async def invalidate_by_tags(self, tags: Iterable[str]) -> int:
        tags = list(tags)
        async with self._lock:
            keys: Set[str] = set()
            for tag in tags:
                keys.update(self._tag_index.get(tag, ()))
            for key in keys:
                self._remove(key)
            if keys:
                self._stats.record_delete(len(keys))
        logger.debug("Invalidated %d entries by tags %s", len(keys), tags)
        return len(keys)

    async def invalidate_by_pattern(self, pattern: Union[str, InvalidationPattern]) -> int:
        try:
            compiled = InvalidationPattern.coerce(pattern).compile()
        except ValueError as e:
            raise CacheKeyError(f"Invalid invalidation pattern: {e}") from e

        async with self._lock:
            keys = [key for key in self._entries if compiled.search(key)]
            for key in keys:
                self._remove(key)
            if keys:
                self._stats.record_delete(len(keys))
        logger.debug("Invalidated %d entries by pattern %s", len(keys), pattern)
        return len(keys)

    async def cleanup_expired(self) -> int:
        """Remove every entry whose TTL has elapsed."""
        async with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                self._remove(key)
            if expired:
                self._stats.record_cleanup(len(expired))
        if expired:
            logger.debug("Swept %d expired entries", len(expired))
        return len(expired)

    async def clear(self) -> None:
        async with self._lock:
            size = len(self._entries)
            self._entries.clear()
            self._tag_index.clear()
            self._stats.reset()
        logger.info("Cache cleared (%d entries)", size)

    async def get_stats(self) -> CacheStats:
        async with self._lock:
            return self._stats.snapshot(len(self._entries))

    async def keys(self) -> List[str]:
        """Keys of entries that have not expired, least recently used first."""
        async with self._lock:
            now = self._clock()
            return [key for key, entry in self._entries.items() if not entry.is_expired(now)]

    async def size(self) -> int:
        async with self._lock:
            return len(self._entries)

    # Internal helpers, called with the lock held

    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key:
            raise CacheKeyError("Cache key must be a non-empty string")

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is None:
            return
        for tag in entry.tags:
            keys = self._tag_index.get(tag)
            if keys is not None:
                keys.discard(key)
                if not keys:
                    del self._tag_index[tag]

    def _evict_one(self) -> None:
        if not self._entries:
            return

        if self.eviction_strategy == EvictionStrategy.LRU:
            # OrderedDict keeps recency order; first is least recent
            victim = next(iter(self._entries))
        elif self.eviction_strategy == EvictionStrategy.FIFO:
            victim = min(self._entries.values(), key=lambda e: e.sequence).key
        else:
            # Ties fall back to recency order
            victim = min(self._entries.values(), key=lambda e: e.access_count).key

        self._remove(victim)
        self._stats.record_eviction()
        logger.debug("Evicted %s (%s)", victim, self.eviction_strategy.value)


def create_memory_cache(settings=None) -> InMemoryCache:
    """Create an InMemoryCache from settings, or with defaults."""
    if settings is None:
        return InMemoryCache()
    return InMemoryCache.from_settings(settings)
