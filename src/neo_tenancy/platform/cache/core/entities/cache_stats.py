"""Cache statistics snapshot."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class CacheStats:
    """Read-only statistics snapshot, recomputed on every request."""

    hits: int
    misses: int
    sets: int
    deletes: int
    cleanups: int
    evictions: int
    current_size: int
    max_size: int
    hit_rate: float
    last_updated: datetime

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["last_updated"] = self.last_updated.isoformat()
        return data
