"""Infrastructure-specific exceptions for neo-tenancy.

Cache failures are recoverable: repository decorators treat them as a miss.
"""

from .base import NeoTenancyError


# Cache Errors
class CacheBackendError(NeoTenancyError):
    """Raised when the cache abstraction itself fails."""
    pass


class CacheConfigurationError(CacheBackendError):
    """Raised when cache configuration is invalid (size bound, TTL, strategy)."""
    pass


class CacheKeyError(CacheBackendError):
    """Raised when a cache key is empty or malformed."""
    pass
