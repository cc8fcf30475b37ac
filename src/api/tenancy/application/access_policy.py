"""Role-based access policy for the tenancy bounded context.

The core enforces authorization itself rather than trusting the
presentation layer's route gating. Each role maps to the actions it may
perform and the scope it may perform them in: every record, or only the
caller's own tenant record.
"""

from __future__ import annotations

from enum import StrEnum

from tenancy.application.value_objects import CurrentUser
from tenancy.domain.aggregates import Tenant
from tenancy.domain.exceptions import AuthorizationError
from tenancy.domain.value_objects import Role


class Action(StrEnum):
    """Operations subject to authorization."""

    READ_ROOMS = "read_rooms"
    MANAGE_ROOMS = "manage_rooms"
    READ_TENANTS = "read_tenants"
    CREATE_TENANT = "create_tenant"
    MANAGE_TENANTS = "manage_tenants"
    MANAGE_LEDGER = "manage_ledger"
    SUBMIT_MAINTENANCE = "submit_maintenance"
    READ_MAINTENANCE = "read_maintenance"
    UPDATE_MAINTENANCE = "update_maintenance"
    RECONCILE = "reconcile"


class AccessScope(StrEnum):
    """How far a granted action reaches."""

    ALL = "all"
    OWN = "own"


_ALL_ACTIONS = {action: AccessScope.ALL for action in Action}

_READ_ONLY_ROOMS = {Action.READ_ROOMS: AccessScope.ALL}

POLICY: dict[Role, dict[Action, AccessScope]] = {
    Role.ADMIN: _ALL_ACTIONS,
    Role.STAFF: {
        Action.READ_ROOMS: AccessScope.ALL,
        Action.READ_TENANTS: AccessScope.ALL,
        Action.READ_MAINTENANCE: AccessScope.ALL,
        Action.UPDATE_MAINTENANCE: AccessScope.ALL,
    },
    Role.TENANT: {
        Action.READ_ROOMS: AccessScope.ALL,
        Action.READ_TENANTS: AccessScope.OWN,
        Action.CREATE_TENANT: AccessScope.OWN,
        Action.SUBMIT_MAINTENANCE: AccessScope.OWN,
        Action.READ_MAINTENANCE: AccessScope.OWN,
        # Tenants may only cancel their own open requests.
        Action.UPDATE_MAINTENANCE: AccessScope.OWN,
    },
    Role.SCHOOL: _READ_ONLY_ROOMS,
    Role.PARENT: _READ_ONLY_ROOMS,
}


def scope_for(user: CurrentUser, action: Action) -> AccessScope | None:
    """Return the scope the user holds for an action, or None."""
    return POLICY.get(user.role, {}).get(action)


def require(user: CurrentUser, action: Action) -> AccessScope:
    """Return the user's scope for an action.

    Raises:
        AuthorizationError: If the user's role does not grant the action
    """
    scope = scope_for(user, action)
    if scope is None:
        raise AuthorizationError(
            f"Role '{user.role}' is not permitted to {action.value.replace('_', ' ')}",
            {"role": user.role.value, "action": action.value},
        )
    return scope


def owns(user: CurrentUser, tenant: Tenant) -> bool:
    """True if the tenant record belongs to the calling user."""
    return tenant.user_id is not None and tenant.user_id == user.user_id


def require_tenant_access(user: CurrentUser, action: Action, tenant: Tenant) -> None:
    """Check an action against a specific tenant record.

    Raises:
        AuthorizationError: If the role lacks the action, or holds it only
            for its own record and the tenant belongs to someone else
    """
    scope = require(user, action)
    if scope == AccessScope.OWN and not owns(user, tenant):
        raise AuthorizationError(
            "You may only access your own tenant record",
            {"role": user.role.value, "action": action.value},
        )
