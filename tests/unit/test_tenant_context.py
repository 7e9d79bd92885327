"""Tests for TenantContext access checks and ambient binding."""

import asyncio

import pytest

from neo_tenancy.core.context import (
    CROSS_TENANT_PERMISSION,
    TenantContext,
    bind_tenant_context,
    get_current_tenant_context,
)
from neo_tenancy.core.exceptions import InvalidTenantContextError
from neo_tenancy.core.value_objects import DepartmentId, OrganizationId, TenantId


class TestTenantAccess:
    """Test tenant-level access decisions."""

    def test_own_tenant_accessible(self, tenant_context, tenant_id):
        assert tenant_context.can_access_tenant(tenant_id)

    def test_foreign_tenant_denied(self, tenant_context, other_tenant_id):
        assert not tenant_context.can_access_tenant(other_tenant_id)

    def test_none_is_denied(self, tenant_context):
        assert not tenant_context.can_access_tenant(None)
        assert not tenant_context.can_access_organization(None)
        assert not tenant_context.can_access_department(None)

    def test_cross_tenant_flag_without_permission(self, tenant_id, other_tenant_id):
        """The flag alone never opens foreign tenants."""
        context = TenantContext(tenant_id=tenant_id, is_cross_tenant=True)
        assert not context.is_cross_tenant_authorized
        assert not context.can_access_tenant(other_tenant_id)
        assert context.can_access_tenant(tenant_id)

    def test_permission_without_flag(self, tenant_id, other_tenant_id):
        context = TenantContext(tenant_id=tenant_id, permissions={CROSS_TENANT_PERMISSION})
        assert not context.can_access_tenant(other_tenant_id)

    def test_authorized_cross_tenant(self, cross_tenant_context, other_tenant_id):
        assert cross_tenant_context.is_cross_tenant_authorized
        assert cross_tenant_context.can_access_tenant(other_tenant_id)
        foreign_org = OrganizationId.generate(other_tenant_id)
        assert cross_tenant_context.can_access_organization(foreign_org)
        assert cross_tenant_context.can_access_department(DepartmentId.generate(foreign_org))


class TestOrganizationAndDepartmentAccess:
    """Test narrowing by organization and department."""

    def test_tenant_only_context_sees_all_organizations(self, tenant_context, tenant_id):
        assert tenant_context.can_access_organization(OrganizationId.generate(tenant_id))

    def test_organization_in_foreign_tenant_denied(self, tenant_context, other_tenant_id):
        assert not tenant_context.can_access_organization(OrganizationId.generate(other_tenant_id))

    def test_narrowed_context_sees_hierarchy_line_only(self, tenant_id):
        """An organization-scoped context reaches itself, ancestors and descendants."""
        root = OrganizationId.generate(tenant_id)
        branch = OrganizationId.generate(tenant_id, parent=root)
        leaf = OrganizationId.generate(tenant_id, parent=branch)
        sibling = OrganizationId.generate(tenant_id, parent=root)

        context = TenantContext(tenant_id=tenant_id, organization_id=branch)
        assert context.can_access_organization(branch)
        assert context.can_access_organization(root)
        assert context.can_access_organization(leaf)
        assert not context.can_access_organization(sibling)

    def test_department_narrowing(self, tenant_id, organization_id):
        team = DepartmentId.generate(organization_id)
        sub_team = DepartmentId.generate(organization_id, parent=team)
        other_team = DepartmentId.generate(organization_id)

        context = TenantContext(tenant_id=tenant_id).with_department(team)
        assert context.organization_id == organization_id
        assert context.can_access_department(team)
        assert context.can_access_department(sub_team)
        assert not context.can_access_department(other_team)

    def test_department_in_inaccessible_organization_denied(self, tenant_id, organization_id):
        other_org = OrganizationId.generate(tenant_id)
        context = TenantContext(tenant_id=tenant_id, organization_id=organization_id)
        assert not context.can_access_department(DepartmentId.generate(other_org))

    def test_department_requires_exact_organization(self, tenant_id):
        """Organization hierarchy reach does not extend to departments."""
        parent = OrganizationId.generate(tenant_id)
        child = OrganizationId.generate(tenant_id, parent=parent)
        context = TenantContext(tenant_id=tenant_id, organization_id=parent)

        assert context.can_access_organization(child)
        assert not context.can_access_department(DepartmentId.generate(child))
        assert context.can_access_department(DepartmentId.generate(parent))

    def test_tenant_wide_context_sees_any_department(self, tenant_context, tenant_id):
        parent = OrganizationId.generate(tenant_id)
        child = OrganizationId.generate(tenant_id, parent=parent)
        assert tenant_context.can_access_department(DepartmentId.generate(child))


class TestValidation:
    """Test context validation rules."""

    def test_valid_context(self, tenant_id, organization_id, department_id):
        context = TenantContext(
            tenant_id=tenant_id,
            organization_id=organization_id,
            department_id=department_id,
        )
        assert context.validate().is_valid
        assert context.ensure_valid() is context

    def test_department_without_organization(self, tenant_id, department_id):
        context = TenantContext(tenant_id=tenant_id, department_id=department_id)
        result = context.validate()
        assert not result.is_valid
        assert "department_id requires organization_id" in result.errors

    def test_organization_from_other_tenant(self, tenant_id, other_tenant_id):
        context = TenantContext(
            tenant_id=tenant_id,
            organization_id=OrganizationId.generate(other_tenant_id),
        )
        assert not context.validate().is_valid
        with pytest.raises(InvalidTenantContextError) as exc_info:
            context.ensure_valid()
        assert exc_info.value.errors == ["organization_id does not belong to tenant_id"]

    def test_department_from_other_organization(self, tenant_id, organization_id):
        other_org = OrganizationId.generate(tenant_id)
        context = TenantContext(
            tenant_id=tenant_id,
            organization_id=organization_id,
            department_id=DepartmentId.generate(other_org),
        )
        assert context.validate().errors == ["department_id does not belong to organization_id"]

    def test_malformed_tenant(self):
        context = TenantContext(tenant_id="not-a-uuid")
        assert not context.validate().is_valid


class TestDerivedContexts:
    """Test the immutable with_* helpers."""

    def test_with_organization_drops_department(self, tenant_id, organization_id, department_id):
        context = TenantContext(tenant_id=tenant_id).with_department(department_id)
        other_org = OrganizationId.generate(tenant_id)
        narrowed = context.with_organization(other_org)
        assert narrowed.organization_id == other_org
        assert narrowed.department_id is None
        assert context.department_id == department_id

    def test_with_permissions_and_cross_tenant(self, tenant_context, other_tenant_id):
        elevated = tenant_context.with_permissions([CROSS_TENANT_PERMISSION]).as_cross_tenant()
        assert elevated.has_permission(CROSS_TENANT_PERMISSION)
        assert elevated.can_access_tenant(other_tenant_id)
        assert not tenant_context.is_cross_tenant

    def test_equality_ignores_extraction_time(self, tenant_id):
        assert TenantContext(tenant_id=tenant_id) == TenantContext(tenant_id=tenant_id)

    def test_to_dict(self, tenant_context, tenant_id):
        data = tenant_context.to_dict()
        assert data["tenant_id"] == tenant_id.value
        assert data["organization_id"] is None
        assert data["permissions"] == []


class TestAmbientContext:
    """Test ContextVar binding."""

    def test_bind_and_restore(self, tenant_context, other_tenant_context):
        assert get_current_tenant_context() is None
        with bind_tenant_context(tenant_context):
            assert get_current_tenant_context() is tenant_context
            with bind_tenant_context(other_tenant_context):
                assert get_current_tenant_context() is other_tenant_context
            assert get_current_tenant_context() is tenant_context
        assert get_current_tenant_context() is None

    def test_restored_after_exception(self, tenant_context):
        with pytest.raises(RuntimeError):
            with bind_tenant_context(tenant_context):
                raise RuntimeError("boom")
        assert get_current_tenant_context() is None

    @pytest.mark.asyncio
    async def test_tasks_see_their_own_context(self):
        """Concurrent tasks never observe each other's binding."""

        async def worker(tenant: TenantId):
            with bind_tenant_context(TenantContext(tenant_id=tenant)):
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                return get_current_tenant_context().tenant_id

        tenants = [TenantId.generate() for _ in range(5)]
        seen = await asyncio.gather(*(worker(tenant) for tenant in tenants))
        assert seen == tenants
