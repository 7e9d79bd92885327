"""Utility helpers for neo-tenancy."""

from .uuid import generate_uuid_v7, is_uuid_string

__all__ = ["generate_uuid_v7", "is_uuid_string"]
