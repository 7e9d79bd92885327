"""Specification utilities."""

from .operators import matches, resolve_field, unwrap

__all__ = ["matches", "resolve_field", "unwrap"]
