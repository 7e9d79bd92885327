"""In-memory entity store.

Reference single-process implementation of EntityStore. Stored entities are
deep-copied on the way in and out, so callers never share mutable state with
the store.
"""

import asyncio
import copy
import logging
from dataclasses import replace
from typing import Any, Dict, Generic, List, Optional, TypeVar

from ....core.exceptions import ConcurrencyConflictError
from ....core.value_objects import EntityId
from ...queries.entities.options import QueryOptions
from ...queries.utils.where import evaluate_where
from ...specifications.utils.operators import resolve_field

logger = logging.getLogger(__name__)

E = TypeVar("E")


def _sort_key(value: Any):
    # None sorts last in ascending order
    return (value is None, value)


class InMemoryEntityStore(Generic[E]):
    """Dictionary-backed store with optimistic version checks."""

    def __init__(self, entity_type: str = "entity"):
        self.entity_type = entity_type
        self._records: Dict[str, E] = {}
        self._lock = asyncio.Lock()

    def _select(self, options: QueryOptions) -> List[E]:
        matched = [record for record in self._records.values() if evaluate_where(options.where, record)]

        # Stable sorts applied from the least to the most significant key
        for field_name, direction in reversed(list(options.order_by.items())):
            matched.sort(
                key=lambda record: _sort_key(resolve_field(record, field_name)),
                reverse=direction == "desc",
            )

        start = options.offset or 0
        end = start + options.limit if options.limit is not None else None
        return matched[start:end]

    async def find_one(self, options: QueryOptions) -> Optional[E]:
        async with self._lock:
            matched = self._select(replace(options, limit=1))
            return copy.deepcopy(matched[0]) if matched else None

    async def find_many(self, options: QueryOptions) -> List[E]:
        async with self._lock:
            return [copy.deepcopy(record) for record in self._select(options)]

    async def count(self, options: QueryOptions) -> int:
        async with self._lock:
            return len(self._select(replace(options, limit=None, offset=None)))

    async def upsert(self, entity: E, expected_version: Optional[int]) -> E:
        entity_id = entity.id.value
        async with self._lock:
            current = self._records.get(entity_id)
            if current is not None and expected_version is not None and current.version != expected_version:
                raise ConcurrencyConflictError(
                    entity_type=self.entity_type,
                    entity_id=entity_id,
                    expected_version=expected_version,
                    actual_version=current.version,
                )
            stored = replace(copy.deepcopy(entity), version=(current.version if current else entity.version) + 1)
            self._records[entity_id] = stored
            logger.debug("Stored %s %s at version %s", self.entity_type, entity_id, stored.version)
            return copy.deepcopy(stored)

    async def remove(self, entity_id: EntityId, options: QueryOptions) -> bool:
        async with self._lock:
            current = self._records.get(entity_id.value)
            if current is None or not evaluate_where(options.where, current):
                return False
            del self._records[entity_id.value]
            return True

    def __len__(self) -> int:
        return len(self._records)
