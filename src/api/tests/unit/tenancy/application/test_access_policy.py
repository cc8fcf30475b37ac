"""Tests for the role-based access policy."""

from datetime import date

import pytest

from tenancy.application.access_policy import (
    AccessScope,
    Action,
    owns,
    require,
    require_tenant_access,
    scope_for,
)
from tenancy.application.value_objects import CurrentUser
from tenancy.domain.aggregates import Tenant
from tenancy.domain.exceptions import AuthorizationError
from tenancy.domain.value_objects import Role, UserId


def user(role: Role, user_id: str = "u-1") -> CurrentUser:
    return CurrentUser(user_id=UserId(value=user_id), username=user_id, role=role)


def tenant_for(user_id: str | None) -> Tenant:
    return Tenant.create(
        name="Ada",
        email="ada@example.com",
        lease_start=date(2025, 1, 1),
        lease_end=date(2025, 12, 31),
        user_id=UserId(value=user_id) if user_id else None,
    )


class TestPolicy:
    def test_admin_may_do_everything(self):
        admin = user(Role.ADMIN)
        assert all(scope_for(admin, action) == AccessScope.ALL for action in Action)

    @pytest.mark.parametrize("role", [Role.SCHOOL, Role.PARENT])
    def test_read_only_roles_see_rooms_only(self, role):
        reader = user(role)
        assert require(reader, Action.READ_ROOMS) == AccessScope.ALL
        for action in set(Action) - {Action.READ_ROOMS}:
            assert scope_for(reader, action) is None

    @pytest.mark.parametrize(
        "action",
        [Action.MANAGE_ROOMS, Action.MANAGE_LEDGER, Action.RECONCILE],
    )
    def test_staff_cannot_mutate_rooms_or_ledger(self, action):
        with pytest.raises(AuthorizationError) as exc_info:
            require(user(Role.STAFF), action)
        assert exc_info.value.details["action"] == action.value

    def test_tenant_scopes_are_own(self):
        resident = user(Role.TENANT)
        assert require(resident, Action.READ_TENANTS) == AccessScope.OWN
        assert require(resident, Action.SUBMIT_MAINTENANCE) == AccessScope.OWN
        assert scope_for(resident, Action.MANAGE_LEDGER) is None


class TestTenantAccess:
    def test_owns_requires_matching_link(self):
        resident = user(Role.TENANT, "u-1")
        assert owns(resident, tenant_for("u-1"))
        assert not owns(resident, tenant_for("u-2"))
        assert not owns(resident, tenant_for(None))

    def test_own_scope_rejects_other_records(self):
        resident = user(Role.TENANT, "u-1")
        require_tenant_access(resident, Action.READ_TENANTS, tenant_for("u-1"))
        with pytest.raises(AuthorizationError):
            require_tenant_access(resident, Action.READ_TENANTS, tenant_for("u-2"))

    def test_all_scope_reads_any_record(self):
        require_tenant_access(
            user(Role.STAFF), Action.READ_TENANTS, tenant_for("someone")
        )
