"""Shared fixtures for neo-tenancy tests."""

from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from neo_tenancy.config.settings import CacheSettings
from neo_tenancy.core.context import CROSS_TENANT_PERMISSION, TenantContext
from neo_tenancy.core.value_objects import DepartmentId, EntityId, OrganizationId, TenantId
from neo_tenancy.features.repositories import (
    BaseTenantIsolatedRepository,
    InMemoryEntityStore,
    TenantIsolatedEntity,
)
from neo_tenancy.platform.cache import InMemoryCache


@dataclass
class User(TenantIsolatedEntity):
    """Sample tenant-isolated entity used across the test suite."""

    name: str = ""
    status: str = "active"
    age: int = 0


class FakeClock:
    """Manually advanced monotonic clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def tenant_id():
    return TenantId.generate()


@pytest.fixture
def other_tenant_id():
    return TenantId.generate()


@pytest.fixture
def organization_id(tenant_id):
    return OrganizationId.generate(tenant_id)


@pytest.fixture
def department_id(organization_id):
    return DepartmentId.generate(organization_id)


@pytest.fixture
def tenant_context(tenant_id):
    return TenantContext(tenant_id=tenant_id, user_id="user-1")


@pytest.fixture
def other_tenant_context(other_tenant_id):
    return TenantContext(tenant_id=other_tenant_id, user_id="user-2")


@pytest.fixture
def cross_tenant_context(tenant_id):
    """Context allowed to reach other tenants."""
    return TenantContext(
        tenant_id=tenant_id,
        is_cross_tenant=True,
        permissions=frozenset({CROSS_TENANT_PERMISSION}),
    )


@pytest.fixture
def make_user(tenant_id):
    """Factory for sample users; defaults to the primary tenant."""

    def _make(tenant=None, organization=None, department=None, **fields):
        return User(
            id=fields.pop("id", None) or EntityId.generate(),
            tenant_id=tenant or tenant_id,
            organization_id=organization,
            department_id=department,
            **fields,
        )

    return _make


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_settings():
    """Explicit settings so the environment cannot leak into tests."""
    return CacheSettings(
        enabled=True,
        default_ttl_ms=60_000,
        max_size=100,
        eviction_strategy="LRU",
        cleanup_interval_ms=0,
        key_prefix=None,
    )


@pytest_asyncio.fixture
async def memory_cache():
    cache = InMemoryCache(max_size=100, default_ttl_ms=60_000, cleanup_interval_ms=0)
    yield cache
    await cache.close()


@pytest.fixture
def user_store():
    return InMemoryEntityStore("user")


@pytest.fixture
def user_repository(user_store):
    return BaseTenantIsolatedRepository(user_store, "user")


@pytest.fixture
def mock_inner_repository():
    """AsyncMock standing in for any tenant-isolated repository."""
    inner = AsyncMock()
    inner.find_by_id.return_value = None
    inner.exists.return_value = False
    inner.delete.return_value = True
    inner.save.side_effect = lambda entity: entity
    return inner
