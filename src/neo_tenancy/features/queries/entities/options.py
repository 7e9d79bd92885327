"""Query builder output and paginated result entities."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class QueryOptions:
    """Backend-agnostic query options.

    ``where`` is a predicate tree built from ``$and`` / ``$or`` / ``$not`` nodes
    and ``{field: {"$op": value}}`` leaves; ``None`` matches everything.
    ``filters`` carries auxiliary filter arguments keyed by filter name.
    """

    where: Optional[Dict[str, Any]] = None
    filters: Dict[str, Any] = field(default_factory=dict)
    order_by: Dict[str, str] = field(default_factory=dict)
    limit: Optional[int] = None
    offset: Optional[int] = None
    fields: Optional[Tuple[str, ...]] = None
    distinct: bool = False

    @property
    def has_predicate(self) -> bool:
        return bool(self.where)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "where": self.where,
            "filters": self.filters,
            "order_by": self.order_by,
            "limit": self.limit,
            "offset": self.offset,
            "fields": list(self.fields) if self.fields is not None else None,
            "distinct": self.distinct,
        }


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """Offset-based page of results with page info."""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        if self.limit == 0:
            return 0
        return (self.total + self.limit - 1) // self.limit

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def count(self) -> int:
        """Number of items in the current page."""
        return len(self.items)
