"""Repository entities."""

from .entity import TenantIsolatedEntity

__all__ = ["TenantIsolatedEntity"]
