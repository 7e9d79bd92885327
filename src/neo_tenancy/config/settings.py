"""
Cache configuration for neo-tenancy.

Settings are read from the environment with the ``NEO_TENANCY_CACHE_`` prefix
(for example ``NEO_TENANCY_CACHE_DEFAULT_TTL_MS=30000``) or passed explicitly.
Nothing here is a process-wide singleton except the optional cached accessor;
caches and decorators receive their settings through constructor arguments.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..platform.cache.core.value_objects.eviction_strategy import EvictionStrategy


class CacheSettings(BaseSettings):
    """Cached repository and in-memory cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="NEO_TENANCY_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Bypass the cache entirely when false")
    default_ttl_ms: int = Field(default=60_000, ge=0, description="Default TTL in milliseconds, 0 = never expire")
    max_size: int = Field(default=1000, ge=1, description="Maximum number of cache entries")
    eviction_strategy: EvictionStrategy = Field(default=EvictionStrategy.LRU, description="LRU, LFU or FIFO")
    cleanup_interval_ms: int = Field(default=60_000, ge=0, description="Background sweep interval, 0 disables the sweep")
    key_prefix: Optional[str] = Field(default=None, description="Optional prefix prepended to every key")

    @field_validator("eviction_strategy", mode="before")
    @classmethod
    def normalize_strategy(cls, v):
        return EvictionStrategy.parse(v)

    @field_validator("key_prefix")
    @classmethod
    def validate_key_prefix(cls, v):
        if v is not None:
            v = v.strip().rstrip(":")
            if not v:
                return None
        return v


@lru_cache()
def get_cache_settings() -> CacheSettings:
    """Get cached settings built from the environment."""
    return CacheSettings()
