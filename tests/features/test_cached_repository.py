"""Tests for the CachedRepository decorator."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from neo_tenancy.config.settings import CacheSettings
from neo_tenancy.core.context import TenantContext, bind_tenant_context
from neo_tenancy.core.exceptions import CacheBackendError, ConcurrencyConflictError
from neo_tenancy.core.value_objects import DepartmentId, EntityId, OrganizationId
from neo_tenancy.features.repositories import (
    CachedRepository,
    create_cached_repository,
)
from neo_tenancy.platform.cache import GLOBAL_TENANT_SENTINEL, InMemoryCache


def fixed_tenant(value):
    return lambda: value


@pytest.fixture
def cached(mock_inner_repository, memory_cache, cache_settings):
    return CachedRepository(
        mock_inner_repository, "user", memory_cache, cache_settings, fixed_tenant("tA")
    )


class TestCachedReads:
    """Test read-through caching of find_by_id and exists."""

    @pytest.mark.asyncio
    async def test_hit_after_first_read(self, cached, mock_inner_repository, make_user):
        """Two reads of the same id reach the inner repository once."""
        user = make_user(name="u1")
        await cached.save(user)
        mock_inner_repository.find_by_id.return_value = user

        first = await cached.find_by_id(user.id)
        second = await cached.find_by_id(user.id)

        assert first == user
        assert second == user
        assert mock_inner_repository.find_by_id.await_count == 1

    @pytest.mark.asyncio
    async def test_not_found_is_cached(self, cached, mock_inner_repository):
        entity_id = EntityId.generate()
        assert await cached.find_by_id(entity_id) is None
        assert await cached.find_by_id(entity_id) is None
        assert mock_inner_repository.find_by_id.await_count == 1

    @pytest.mark.asyncio
    async def test_returned_values_are_copies(self, cached, mock_inner_repository, make_user):
        """Mutating a returned entity never alters the cached entry."""
        user = make_user(name="original")
        mock_inner_repository.find_by_id.return_value = user

        first = await cached.find_by_id(user.id)
        first.name = "mutated"
        user.name = "also mutated"

        assert (await cached.find_by_id(user.id)).name == "original"

    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, cached, mock_inner_repository, make_user):
        user = make_user()
        mock_inner_repository.find_by_id.side_effect = [RuntimeError("db down"), user]

        with pytest.raises(RuntimeError):
            await cached.find_by_id(user.id)
        assert await cached.find_by_id(user.id) == user
        assert await cached.find_by_id(user.id) == user
        assert mock_inner_repository.find_by_id.await_count == 2

    @pytest.mark.asyncio
    async def test_tenants_do_not_share_entries(self, mock_inner_repository, memory_cache, cache_settings, make_user):
        """The same logical id under two tenants is two cache entries."""
        current = {"tenant": "tA"}
        repository = CachedRepository(
            mock_inner_repository, "user", memory_cache, cache_settings, lambda: current["tenant"]
        )
        user = make_user()
        mock_inner_repository.find_by_id.return_value = user

        await repository.find_by_id(user.id)
        current["tenant"] = "tB"
        await repository.find_by_id(user.id)
        await repository.find_by_id(user.id)
        current["tenant"] = "tA"
        await repository.find_by_id(user.id)

        assert mock_inner_repository.find_by_id.await_count == 2
        keys = await memory_cache.keys()
        assert {key.split(":")[0] for key in keys} == {"tA", "tB"}

    @pytest.mark.asyncio
    async def test_ambient_context_discriminator(
        self, mock_inner_repository, memory_cache, cache_settings, tenant_context, tenant_id
    ):
        repository = CachedRepository(mock_inner_repository, "user", memory_cache, cache_settings)
        entity_id = EntityId.generate()

        with bind_tenant_context(tenant_context):
            await repository.find_by_id(entity_id)
        await repository.find_by_id(entity_id)

        keys = await memory_cache.keys()
        assert sorted(key.split(":")[0] for key in keys) == sorted([tenant_id.value, GLOBAL_TENANT_SENTINEL])
        assert all(":repo:user:find_by_id:" in key for key in keys)

    @pytest.mark.asyncio
    async def test_key_prefix(self, mock_inner_repository, memory_cache):
        settings = CacheSettings(key_prefix="app", cleanup_interval_ms=0)
        repository = CachedRepository(mock_inner_repository, "user", memory_cache, settings, fixed_tenant("tA"))
        await repository.exists(EntityId.generate())

        (key,) = await memory_cache.keys()
        assert key.startswith("app:tA:repo:user:exists:")

    @pytest.mark.asyncio
    async def test_ttl_expiry(self, mock_inner_repository, make_user):
        """Entries older than the TTL are reloaded from the inner repository."""
        settings = CacheSettings(default_ttl_ms=20, cleanup_interval_ms=10)
        user = make_user()
        mock_inner_repository.find_by_id.return_value = user

        async with InMemoryCache.from_settings(settings) as cache:
            repository = CachedRepository(mock_inner_repository, "user", cache, settings, fixed_tenant("tA"))
            await repository.find_by_id(user.id)
            await repository.find_by_id(user.id)
            assert mock_inner_repository.find_by_id.await_count == 1

            await asyncio.sleep(0.02 + 0.01 + 0.03)
            await repository.find_by_id(user.id)

        assert mock_inner_repository.find_by_id.await_count == 2


class TestInvalidation:
    """Test that writes never leave stale entries behind."""

    @pytest.mark.asyncio
    async def test_delete_invalidates(self, cached, mock_inner_repository, make_user):
        user = make_user(name="u2")
        mock_inner_repository.find_by_id.return_value = user
        assert await cached.find_by_id(user.id) == user

        assert await cached.delete(user.id) is True
        mock_inner_repository.find_by_id.return_value = None

        assert await cached.find_by_id(user.id) is None
        assert mock_inner_repository.find_by_id.await_count == 2

    @pytest.mark.asyncio
    async def test_exists_false_flips_after_save(self, cached, mock_inner_repository, make_user):
        """A cached exists=False never survives a later save."""
        user = make_user()
        mock_inner_repository.exists.side_effect = [False, True]

        assert await cached.exists(user.id) is False
        assert await cached.exists(user.id) is False
        await cached.save(user)
        assert await cached.exists(user.id) is True
        assert mock_inner_repository.exists.await_count == 2

    @pytest.mark.asyncio
    async def test_save_invalidates_entity_type_entries(self, cached, mock_inner_repository, make_user, memory_cache):
        """The entity-type tag goes too, so list-like results of the type never go stale."""
        first, second = make_user(), make_user()
        await cached.find_by_id(first.id)
        await cached.find_by_id(second.id)
        await memory_cache.set("tB:repo:user:find_by_id:0000", None, tags=["tB:entity:user"])

        await cached.save(first)

        assert await memory_cache.keys() == ["tB:repo:user:find_by_id:0000"]
        await cached.find_by_id(second.id)
        assert mock_inner_repository.find_by_id.await_count == 3

    @pytest.mark.asyncio
    async def test_save_invalidates_owner_tenant_entries(
        self, mock_inner_repository, memory_cache, cache_settings, make_user, tenant_id
    ):
        """Saving through another discriminator still clears the owning tenant's entries."""
        user = make_user()
        owner_view = CachedRepository(
            mock_inner_repository, "user", memory_cache, cache_settings, fixed_tenant(tenant_id.value)
        )
        admin_view = CachedRepository(
            mock_inner_repository, "user", memory_cache, cache_settings, fixed_tenant("admin")
        )
        await owner_view.find_by_id(user.id)
        await admin_view.save(user)
        assert await memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_conflict_invalidates_and_reraises(self, cached, mock_inner_repository, make_user, memory_cache):
        user = make_user()
        await cached.find_by_id(user.id)
        mock_inner_repository.save.side_effect = ConcurrencyConflictError("user", user.id.value, 0, 1)

        with pytest.raises(ConcurrencyConflictError):
            await cached.save(user)
        assert await memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_failed_write_keeps_cache(self, cached, mock_inner_repository, make_user, memory_cache):
        user = make_user()
        await cached.find_by_id(user.id)
        mock_inner_repository.save.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await cached.save(user)
        assert await memory_cache.size() == 1

    @pytest.mark.asyncio
    async def test_pattern_invalidation(self, mock_inner_repository, memory_cache, cache_settings, make_user):
        repository = CachedRepository(
            mock_inner_repository, "user", memory_cache, cache_settings, fixed_tenant("tP")
        )
        user = make_user()
        await repository.find_by_id(user.id)

        assert await repository.invalidate_by_pattern("tP:repo:user:*") == 1
        await repository.find_by_id(user.id)
        assert mock_inner_repository.find_by_id.await_count == 2

    @pytest.mark.asyncio
    async def test_default_pattern_and_invalidate_all(self, cached, memory_cache, make_user):
        first, second = make_user(), make_user()
        await cached.find_by_id(first.id)
        await cached.exists(second.id)
        await memory_cache.set("tB:repo:user:find_by_id:0000", None)

        assert await cached.invalidate_by_pattern() == 2
        await cached.find_by_id(first.id)
        assert await cached.invalidate_all() == 1
        assert await memory_cache.keys() == ["tB:repo:user:find_by_id:0000"]

    @pytest.mark.asyncio
    async def test_invalidate_entity(self, cached, memory_cache, make_user):
        user = make_user()
        await cached.find_by_id(user.id)
        await cached.exists(user.id)
        await cached.invalidate_entity(user.id)
        assert await memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_invalidate_entities(self, cached, memory_cache, make_user):
        """Bulk invalidation clears every listed id in one sweep."""
        first, second = make_user(), make_user()
        await cached.find_by_id(first.id)
        await cached.exists(second.id)
        await memory_cache.set("tB:repo:user:find_by_id:0000", None, tags=["tB:entity:user"])

        assert await cached.invalidate_entities([first.id, second.id]) == 2
        assert await memory_cache.keys() == ["tB:repo:user:find_by_id:0000"]


class TestScopedKeys:
    """Test that organization and department narrowing never share entries."""

    @pytest.mark.asyncio
    async def test_organization_scoped_context_misses_wider_entry(
        self, user_repository, memory_cache, cache_settings, tenant_id, make_user
    ):
        """An entity cached for a tenant-wide caller stays hidden from another organization."""
        org1 = OrganizationId.generate(tenant_id)
        org2 = OrganizationId.generate(tenant_id)
        repository = create_cached_repository(user_repository, "user", memory_cache, cache_settings)
        user = make_user(organization=org2, name="secret")

        with bind_tenant_context(TenantContext(tenant_id=tenant_id)):
            await repository.save(user)
            assert (await repository.find_by_id(user.id)).name == "secret"
            assert await repository.exists(user.id) is True

        with bind_tenant_context(TenantContext(tenant_id=tenant_id, organization_id=org1)):
            assert await repository.find_by_id(user.id) is None
            assert await repository.exists(user.id) is False

        with bind_tenant_context(TenantContext(tenant_id=tenant_id, organization_id=org2)):
            assert (await repository.find_by_id(user.id)).name == "secret"

    @pytest.mark.asyncio
    async def test_narrow_miss_is_not_served_to_wider_scope(
        self, user_repository, memory_cache, cache_settings, tenant_id, make_user
    ):
        org1 = OrganizationId.generate(tenant_id)
        org2 = OrganizationId.generate(tenant_id)
        repository = create_cached_repository(user_repository, "user", memory_cache, cache_settings)
        user = make_user(organization=org2)
        wide = TenantContext(tenant_id=tenant_id)

        with bind_tenant_context(wide):
            await repository.save(user)
        with bind_tenant_context(wide.with_organization(org1)):
            assert await repository.exists(user.id) is False
        with bind_tenant_context(wide):
            assert await repository.exists(user.id) is True

    @pytest.mark.asyncio
    async def test_department_scoped_contexts_use_separate_entries(
        self, user_repository, memory_cache, cache_settings, tenant_id, organization_id, make_user
    ):
        team_a = DepartmentId.generate(organization_id)
        team_b = DepartmentId.generate(organization_id)
        repository = create_cached_repository(user_repository, "user", memory_cache, cache_settings)
        user = make_user(organization=organization_id, department=team_b)
        wide = TenantContext(tenant_id=tenant_id)

        with bind_tenant_context(wide):
            saved = await repository.save(user)
        with bind_tenant_context(wide.with_department(team_b)):
            assert await repository.find_by_id(user.id) == saved
        with bind_tenant_context(wide.with_department(team_a)):
            assert await repository.find_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_write_clears_every_scope_variant(
        self, user_repository, memory_cache, cache_settings, tenant_id, make_user
    ):
        """Tags stay keyed on tenant and id, so one save clears all scoped entries."""
        org1 = OrganizationId.generate(tenant_id)
        repository = create_cached_repository(user_repository, "user", memory_cache, cache_settings)
        user = make_user(organization=org1)
        wide = TenantContext(tenant_id=tenant_id)

        with bind_tenant_context(wide):
            await repository.exists(user.id)
        with bind_tenant_context(wide.with_organization(org1)):
            await repository.exists(user.id)
        assert await memory_cache.size() == 2

        with bind_tenant_context(wide):
            await repository.save(user)
        assert await memory_cache.size() == 0


class TestConcurrentWrites:
    """Test loads that overlap a write."""

    @pytest.mark.asyncio
    async def test_exists_loaded_across_save_is_not_cached(self, cached, mock_inner_repository, make_user):
        """A false answer read before a save must not be cached after it."""
        user = make_user()
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_then_current(entity_id):
            if not started.is_set():
                started.set()
                await release.wait()
                return False
            return True

        mock_inner_repository.exists.side_effect = slow_then_current

        pending = asyncio.create_task(cached.exists(user.id))
        await started.wait()
        await cached.save(user)
        release.set()

        assert await pending is False
        assert await cached.exists(user.id) is True
        assert await cached.exists(user.id) is True
        assert mock_inner_repository.exists.await_count == 2

    @pytest.mark.asyncio
    async def test_find_loaded_across_delete_is_not_cached(self, cached, mock_inner_repository, make_user):
        user = make_user()
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_then_gone(entity_id):
            if not started.is_set():
                started.set()
                await release.wait()
                return user
            return None

        mock_inner_repository.find_by_id.side_effect = slow_then_gone

        pending = asyncio.create_task(cached.find_by_id(user.id))
        await started.wait()
        assert await cached.delete(user.id) is True
        release.set()

        assert await pending == user
        assert await cached.find_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_loads_after_a_write_are_cached(self, cached, mock_inner_repository, make_user):
        user = make_user()
        await cached.save(user)
        await cached.exists(user.id)
        await cached.exists(user.id)
        assert mock_inner_repository.exists.await_count == 1


class TestDegradedCache:
    """Test behaviour when the cache is disabled or failing."""

    @pytest.fixture
    def broken_cache(self):
        cache = AsyncMock()
        cache.get.side_effect = CacheBackendError("backend unavailable")
        cache.set.side_effect = CacheBackendError("backend unavailable")
        cache.invalidate_by_tags.side_effect = CacheBackendError("backend unavailable")
        return cache

    @pytest.mark.asyncio
    async def test_read_failure_is_a_miss(self, mock_inner_repository, broken_cache, cache_settings, make_user):
        user = make_user()
        mock_inner_repository.find_by_id.return_value = user
        repository = CachedRepository(mock_inner_repository, "user", broken_cache, cache_settings, fixed_tenant("tA"))

        assert await repository.find_by_id(user.id) == user
        assert await repository.find_by_id(user.id) == user
        assert mock_inner_repository.find_by_id.await_count == 2

    @pytest.mark.asyncio
    async def test_invalidation_failure_is_logged(
        self, mock_inner_repository, broken_cache, cache_settings, make_user, caplog
    ):
        user = make_user()
        repository = CachedRepository(mock_inner_repository, "user", broken_cache, cache_settings, fixed_tenant("tA"))

        with caplog.at_level(logging.ERROR):
            assert await repository.save(user) == user

        assert any("Cache invalidation failed" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_disabled_bypasses_cache(self, mock_inner_repository, make_user):
        cache = AsyncMock()
        settings = CacheSettings(enabled=False, cleanup_interval_ms=0)
        repository = CachedRepository(mock_inner_repository, "user", cache, settings, fixed_tenant("tA"))
        user = make_user()

        await repository.find_by_id(user.id)
        await repository.find_by_id(user.id)
        await repository.save(user)

        assert mock_inner_repository.find_by_id.await_count == 2
        cache.get.assert_not_called()
        cache.invalidate_by_tags.assert_not_called()


class TestDelegation:
    """Test pass-through of uncached operations."""

    @pytest.mark.asyncio
    async def test_scoped_reads_delegate(self, cached, mock_inner_repository, tenant_context, tenant_id, memory_cache):
        mock_inner_repository.find_all_by_context.return_value = []
        mock_inner_repository.count_by_tenant.return_value = 3

        assert await cached.find_all_by_context(tenant_context) == []
        assert await cached.count_by_tenant(tenant_id, tenant_context) == 3
        mock_inner_repository.find_all_by_context.assert_awaited_once_with(tenant_context)
        assert await memory_cache.size() == 0

    @pytest.mark.asyncio
    async def test_over_real_repository(self, user_repository, memory_cache, cache_settings, tenant_context, make_user):
        """End to end: ambient context, real store, shared cache."""
        repository = create_cached_repository(user_repository, "user", memory_cache, cache_settings)
        user = make_user(name="alice")

        with bind_tenant_context(tenant_context):
            assert await repository.exists(user.id) is False
            saved = await repository.save(user)
            assert await repository.exists(user.id) is True
            assert await repository.find_by_id(user.id) == saved
            assert await repository.delete(user.id) is True
            assert await repository.find_by_id(user.id) is None

    @pytest.mark.asyncio
    async def test_factory_builds_cache(self, mock_inner_repository, cache_settings):
        repository = create_cached_repository(mock_inner_repository, "user", settings=cache_settings)
        assert isinstance(repository.cache, InMemoryCache)
        assert repository.cache.max_size == cache_settings.max_size
        await repository.cache.close()
