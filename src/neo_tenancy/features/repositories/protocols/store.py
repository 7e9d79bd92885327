"""Storage collaborator protocol.

Backends (SQL, document stores, the in-memory reference store) implement this
narrow surface. They receive fully built QueryOptions, tenant filter already
included, and never make isolation decisions themselves.
"""

from typing import List, Optional, Protocol, TypeVar, runtime_checkable

from ....core.value_objects import EntityId
from ...queries.entities.options import QueryOptions

E = TypeVar("E")


@runtime_checkable
class EntityStore(Protocol[E]):
    """Asynchronous entity storage."""

    async def find_one(self, options: QueryOptions) -> Optional[E]:
        ...

    async def find_many(self, options: QueryOptions) -> List[E]:
        ...

    async def count(self, options: QueryOptions) -> int:
        ...

    async def upsert(self, entity: E, expected_version: Optional[int]) -> E:
        """Insert or replace, raising ConcurrencyConflictError on a version mismatch.

        Returns the stored entity with its new version.
        """
        ...

    async def remove(self, entity_id: EntityId, options: QueryOptions) -> bool:
        """Remove the entity if it matches ``options.where``; True when removed."""
        ...
