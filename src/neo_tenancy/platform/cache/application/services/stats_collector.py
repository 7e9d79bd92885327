"""Cache statistics collector."""

from datetime import datetime, timezone

from ...core.entities.cache_stats import CacheStats


class CacheStatsCollector:
    """Mutable counters behind CacheStats snapshots.

    Not synchronized on its own; the owning cache updates it inside its lock.
    """

    def __init__(self, max_size: int):
        self.max_size = max_size
        self.reset()

    def reset(self) -> None:
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.deletes = 0
        self.cleanups = 0
        self.evictions = 0
        self.last_updated = datetime.now(timezone.utc)

    def _touch(self) -> None:
        self.last_updated = datetime.now(timezone.utc)

    def record_hit(self) -> None:
        self.hits += 1
        self._touch()

    def record_miss(self) -> None:
        self.misses += 1
        self._touch()

    def record_set(self) -> None:
        self.sets += 1
        self._touch()

    def record_delete(self, count: int = 1) -> None:
        self.deletes += count
        self._touch()

    def record_cleanup(self, count: int = 1) -> None:
        self.cleanups += count
        self._touch()

    def record_eviction(self) -> None:
        self.evictions += 1
        self._touch()

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def snapshot(self, current_size: int) -> CacheStats:
        return CacheStats(
            hits=self.hits,
            misses=self.misses,
            sets=self.sets,
            deletes=self.deletes,
            cleanups=self.cleanups,
            evictions=self.evictions,
            current_size=current_size,
            max_size=self.max_size,
            hit_rate=self.hit_rate,
            last_updated=self.last_updated,
        )
