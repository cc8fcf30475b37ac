"""Tenant application service for the tenancy bounded context.

Handles the tenant directory: register, read, list, update profile and
archive. Room links, balances and payment status are not editable here;
they change only through the assignment service and reconciliation.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any

from tenancy.application.access_policy import (
    AccessScope,
    Action,
    require,
    require_tenant_access,
)
from tenancy.application.observability import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)
from tenancy.application.services.assignment_service import AssignmentService
from tenancy.application.services.payment_ledger import ChargeLedger
from tenancy.application.services.reconciliation import Reconciler
from tenancy.application.services.unit_of_work import UnitOfWork
from tenancy.application.value_objects import CurrentUser, TenantFilter
from tenancy.domain.aggregates import Charge, RoomAssignmentLog, Tenant
from tenancy.domain.aggregates.tenant import PROFILE_FIELDS, SERVICE_OWNED_FIELDS
from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ForbiddenFieldError,
    NotFoundError,
    ValidationError,
)
from tenancy.domain.value_objects import (
    AssignmentAction,
    PaymentStatus,
    RoomId,
    TenantId,
    UserId,
)
from tenancy.ports.repositories import IAssignmentLogRepository, ITenantRepository

OPENING_CHARGE_DESCRIPTION = "Opening charge"


class TenantService:
    """Application service for tenant management."""

    def __init__(
        self,
        tenant_repository: ITenantRepository,
        assignment_log_repository: IAssignmentLogRepository,
        charge_ledger: ChargeLedger,
        assignment_service: AssignmentService,
        reconciler: Reconciler,
        unit_of_work: UnitOfWork,
        probe: TenantServiceProbe | None = None,
    ):
        """Initialize TenantService with dependencies.

        Args:
            tenant_repository: Repository for tenant persistence
            assignment_log_repository: Audit log for assignments at registration
            charge_ledger: Ledger for an optional opening charge
            assignment_service: Reserves a room place at registration
            reconciler: Repairs drifted balances on read
            unit_of_work: Transaction boundary with conflict retries
            probe: Optional domain probe for observability
        """
        self._tenants = tenant_repository
        self._logs = assignment_log_repository
        self._charge_ledger = charge_ledger
        self._assignments = assignment_service
        self._reconciler = reconciler
        self._uow = unit_of_work
        self._probe = probe or DefaultTenantServiceProbe()

    async def create_tenant(
        self,
        actor: CurrentUser,
        name: str,
        email: str,
        lease_start: date,
        lease_end: date,
        phone: str | None = None,
        emergency_contact: str | None = None,
        address: str | None = None,
        user_id: UserId | None = None,
        room_id: RoomId | None = None,
        opening_charge: Decimal | int | str | None = None,
    ) -> Tenant:
        """Register a tenant.

        The tenant starts with a zero balance and ``paid`` status. An
        opening charge (deposit or first rent) is posted due on the lease
        start, leaving the tenant ``pending``. When an administrator gives a
        room the tenant is assigned to it in the same unit of work, so a full
        room means no tenant is created.

        Tenant-role callers may register only themselves and without an
        opening charge. A room they give is kept as ``requested_room_id``
        until an administrator approves the application.

        Raises:
            AuthorizationError: If the caller may not create this tenant
            ValidationError: If any field is invalid
            NotFoundError: If the room does not exist
            ConflictError: If the room is full or under maintenance, or the
                user already has a tenant record
        """
        scope = require(actor, Action.CREATE_TENANT)
        if scope == AccessScope.OWN:
            if user_id is not None and user_id != actor.user_id:
                raise AuthorizationError(
                    "You may only register yourself",
                    {"role": actor.role.value},
                )
            if opening_charge is not None:
                raise AuthorizationError(
                    "Charges require an administrator",
                    {"role": actor.role.value},
                )
            user_id = actor.user_id
            requested_room_id, room_id = room_id, None
        else:
            requested_room_id = None

        draft = Tenant.create(
            name=name,
            email=email,
            lease_start=lease_start,
            lease_end=lease_end,
            phone=phone,
            emergency_contact=emergency_contact,
            address=address,
            user_id=user_id,
        )
        charge = None
        if opening_charge is not None:
            charge = Charge.post(
                tenant_id=draft.id,
                amount=opening_charge,
                due_date=lease_start,
                description=OPENING_CHARGE_DESCRIPTION,
            )

        async def work() -> Tenant:
            tenant = replace(draft)
            if tenant.user_id is not None:
                existing = await self._tenants.get_by_user_id(tenant.user_id)
                if existing is not None:
                    raise ConflictError(
                        f"User {tenant.user_id} already has a tenant record",
                        {"tenant_id": existing.id.value},
                    )
            if room_id is not None:
                room = await self._assignments.reserve_slot(room_id)
                tenant.link_room(room.id)
            if requested_room_id is not None:
                room = await self._assignments.check_vacancy(requested_room_id)
                tenant.request_room(room.id)
            if charge is not None:
                tenant.settle(charge.amount, PaymentStatus.PENDING)

            await self._tenants.add(tenant)
            if charge is not None:
                await self._charge_ledger.post_charge(charge)
            if room_id is not None:
                await self._logs.add(
                    RoomAssignmentLog.record(
                        tenant_id=tenant.id,
                        room_id=room_id,
                        action=AssignmentAction.ASSIGNED,
                        actor_id=actor.user_id,
                        notes="Assigned at registration",
                    )
                )
            return tenant

        tenant = await self._uow.run("create_tenant", work)
        self._probe.tenant_created(tenant_id=tenant.id.value, name=tenant.name)
        if tenant.requested_room_id is not None:
            self._probe.room_requested(
                tenant_id=tenant.id.value, room_id=tenant.requested_room_id.value
            )
        return tenant

    async def update_tenant(
        self, actor: CurrentUser, tenant_id: TenantId, patch: dict[str, Any]
    ) -> Tenant:
        """Apply a partial update to a tenant's profile.

        Raises:
            AuthorizationError: If the caller may not manage tenants
            ForbiddenFieldError: If the patch sets a service-owned field such
                as room_id, balance or payment_status
            ValidationError: If a field is unknown or invalid, or a required
                field is set to null
            NotFoundError: If the tenant does not exist
            ConflictError: If user_id is already linked to another tenant
        """
        require(actor, Action.MANAGE_TENANTS)

        forbidden = sorted(set(patch) & SERVICE_OWNED_FIELDS)
        if forbidden:
            self._probe.forbidden_fields_rejected(
                tenant_id=tenant_id.value, fields=forbidden
            )
            raise ForbiddenFieldError(forbidden)
        unknown = sorted(set(patch) - PROFILE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown tenant field(s): {', '.join(unknown)}",
                {"fields": unknown},
            )

        async def work() -> Tenant:
            tenant = await self._load(tenant_id)
            user_id = patch.get("user_id")
            if user_id is not None:
                existing = await self._tenants.get_by_user_id(user_id)
                if existing is not None and existing.id != tenant_id:
                    raise ConflictError(
                        f"User {user_id} already has a tenant record",
                        {"tenant_id": existing.id.value},
                    )
            tenant.update_profile(patch)
            await self._tenants.save(tenant)
            return tenant

        tenant = await self._uow.run("update_tenant", work)
        self._probe.tenant_updated(tenant_id=tenant_id.value, fields=sorted(patch))
        return tenant

    async def archive_tenant(self, actor: CurrentUser, tenant_id: TenantId) -> Tenant:
        """Archive a tenant at lease termination.

        Raises:
            AuthorizationError: If the caller may not manage tenants
            NotFoundError: If the tenant does not exist
            ConflictError: If the tenant is still assigned to a room
        """
        require(actor, Action.MANAGE_TENANTS)

        async def work() -> Tenant:
            tenant = await self._load(tenant_id)
            if tenant.archived:
                return tenant
            tenant.archive()
            await self._tenants.save(tenant)
            return tenant

        tenant = await self._uow.run("archive_tenant", work)
        self._probe.tenant_archived(tenant_id=tenant_id.value)
        return tenant

    async def get_tenant(self, actor: CurrentUser, tenant_id: TenantId) -> Tenant:
        """Retrieve a tenant, repairing balance and status if they drifted.

        Raises:
            NotFoundError: If the tenant does not exist
            AuthorizationError: If the caller may not read this tenant
        """
        require(actor, Action.READ_TENANTS)
        async with self._uow.begin():
            tenant = await self._load(tenant_id)
            require_tenant_access(actor, Action.READ_TENANTS, tenant)
            await self._reconciler.reconcile_tenant(tenant)

        self._probe.tenant_retrieved(tenant_id=tenant_id.value)
        return tenant

    async def list_tenants(
        self, actor: CurrentUser, filters: TenantFilter | None = None
    ) -> list[Tenant]:
        """List tenants matching the filters, each reconciled.

        Tenant-role callers see only their own record.
        """
        scope = require(actor, Action.READ_TENANTS)
        filters = filters or TenantFilter()

        async with self._uow.begin():
            if scope == AccessScope.OWN:
                own = await self._tenants.get_by_user_id(actor.user_id)
                tenants = [own] if own is not None else []
            else:
                tenants = await self._tenants.list_all()
            candidates = [
                t for t in tenants if filters.include_archived or not t.archived
            ]
            for tenant in candidates:
                await self._reconciler.reconcile_tenant(tenant)

        matching = [t for t in candidates if _matches(t, filters)]
        self._probe.tenants_listed(count=len(matching))
        return matching

    async def _load(self, tenant_id: TenantId) -> Tenant:
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            self._probe.tenant_not_found(tenant_id=tenant_id.value)
            raise NotFoundError(
                f"Tenant {tenant_id} not found", {"tenant_id": tenant_id.value}
            )
        return tenant


def _matches(tenant: Tenant, filters: TenantFilter) -> bool:
    if (
        filters.payment_status is not None
        and tenant.payment_status != filters.payment_status
    ):
        return False
    if filters.room_id is not None and tenant.room_id != filters.room_id:
        return False
    if filters.unassigned_only and tenant.room_id is not None:
        return False
    return True
