"""Query entities."""

from .options import QueryOptions, PaginatedResult

__all__ = ["QueryOptions", "PaginatedResult"]
