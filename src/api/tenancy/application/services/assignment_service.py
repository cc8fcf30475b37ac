"""Assignment application service for the tenancy bounded context.

Every operation that touches more than one entity lives here: linking a
tenant to a room, applying a payment to a balance, posting charges and
changing a room's type. Each runs as one unit of work. Room and tenant
writes are compare-and-swap on the aggregate version; when one loses a race
the whole unit of work is retried from fresh reads a bounded number of
times before the caller sees a ConflictError.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from tenancy.application.access_policy import (
    Action,
    require,
    require_tenant_access,
)
from tenancy.application.observability import (
    AssignmentServiceProbe,
    DefaultAssignmentServiceProbe,
)
from tenancy.application.services.payment_ledger import ChargeLedger, PaymentLedger
from tenancy.application.services.reconciliation import Reconciler
from tenancy.application.services.unit_of_work import UnitOfWork
from tenancy.application.value_objects import (
    AssignmentResult,
    CurrentUser,
    PaymentReceipt,
    ReconciliationReport,
)
from tenancy.domain.aggregates import Charge, Room, RoomAssignmentLog, Tenant
from tenancy.domain.aggregates.charge import first_of_month
from tenancy.domain.exceptions import ConflictError, NotFoundError
from tenancy.domain.value_objects import (
    AssignmentAction,
    PaymentMethod,
    RoomId,
    RoomType,
    TenantId,
)
from tenancy.ports.repositories import (
    IAssignmentLogRepository,
    IRoomRepository,
    ITenantRepository,
)

DEFAULT_RENT_GRACE_DAYS = 5
APPLICATION_APPROVED_NOTE = "Room application approved"


class AssignmentService:
    """Application service for cross-entity operations.

    ``Tenant.room_id`` is the authoritative side of the tenant/room link;
    ``Room.occupant_count`` is a cache recomputed from the live tenant count
    before every capacity decision.
    """

    def __init__(
        self,
        room_repository: IRoomRepository,
        tenant_repository: ITenantRepository,
        assignment_log_repository: IAssignmentLogRepository,
        payment_ledger: PaymentLedger,
        charge_ledger: ChargeLedger,
        reconciler: Reconciler,
        unit_of_work: UnitOfWork,
        probe: AssignmentServiceProbe | None = None,
        rent_grace_days: int = DEFAULT_RENT_GRACE_DAYS,
    ):
        """Initialize AssignmentService with dependencies.

        Args:
            room_repository: Repository for room persistence
            tenant_repository: Repository for tenant persistence
            assignment_log_repository: Audit log of assignment changes
            payment_ledger: Ledger that records payments
            charge_ledger: Ledger that posts charges
            reconciler: Recomputes cached occupancy and balances
            unit_of_work: Transaction boundary with conflict retries
            probe: Optional domain probe for observability
            rent_grace_days: Days after the first of the month rent is due
        """
        self._rooms = room_repository
        self._tenants = tenant_repository
        self._logs = assignment_log_repository
        self._payment_ledger = payment_ledger
        self._charge_ledger = charge_ledger
        self._reconciler = reconciler
        self._uow = unit_of_work
        self._probe = probe or DefaultAssignmentServiceProbe()
        self._rent_grace_days = rent_grace_days

    async def reserve_slot(self, room_id: RoomId) -> Room:
        """Claim one place in a room inside the current unit of work.

        The cached occupant count is first replaced by the live count, so
        the capacity check never trusts a drifted cache.

        Raises:
            NotFoundError: If the room does not exist
            ConflictError: If the room is under maintenance or full
            StaleVersionError: If the room changed concurrently
        """
        room = await self._load_room(room_id)
        await self._occupy(room)
        return room

    async def assign_tenant_to_room(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        room_id: RoomId,
        notes: str | None = None,
    ) -> AssignmentResult:
        """Link a tenant to a room and take one of its places.

        Raises:
            AuthorizationError: If the caller may not manage assignments
            NotFoundError: If the tenant or room does not exist
            ConflictError: If the tenant is archived or in another room, the
                room is full or under maintenance, or retries ran out
        """
        require(actor, Action.MANAGE_LEDGER)

        async def work() -> AssignmentResult:
            tenant = await self._load_tenant(tenant_id)
            room = await self._load_room(room_id)
            return await self._assign(actor, tenant, room, notes)

        try:
            result = await self._uow.run("assign_tenant_to_room", work)
        except ConflictError as e:
            self._probe.assignment_rejected(
                tenant_id=tenant_id.value, room_id=room_id.value, reason=e.message
            )
            raise

        if result.changed and result.room is not None:
            self._probe.tenant_assigned(
                tenant_id=tenant_id.value,
                room_id=room_id.value,
                occupant_count=result.room.occupant_count,
            )
        return result

    async def approve_room_application(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        notes: str | None = None,
    ) -> AssignmentResult:
        """Assign a self-registered tenant to the room they applied for.

        Runs the same checks as a direct assignment; the pending request is
        cleared only when the tenant actually takes the place.

        Raises:
            AuthorizationError: If the caller may not manage assignments
            NotFoundError: If the tenant or requested room does not exist
            ConflictError: If there is no pending application, the tenant is
                archived or already housed, the room is full or under
                maintenance, or retries ran out
        """
        require(actor, Action.MANAGE_LEDGER)

        async def work() -> AssignmentResult:
            tenant = await self._load_tenant(tenant_id)
            if tenant.requested_room_id is None:
                raise ConflictError(
                    f"Tenant {tenant_id} has no pending room application",
                    {"tenant_id": tenant_id.value},
                )
            room = await self._load_room(tenant.requested_room_id)
            return await self._assign(
                actor, tenant, room, notes or APPLICATION_APPROVED_NOTE
            )

        try:
            result = await self._uow.run("approve_room_application", work)
        except ConflictError as e:
            self._probe.room_application_rejected(
                tenant_id=tenant_id.value, reason=e.message
            )
            raise

        if result.changed and result.room is not None:
            self._probe.room_application_approved(
                tenant_id=tenant_id.value,
                room_id=result.room.id.value,
                occupant_count=result.room.occupant_count,
            )
        return result

    async def check_vacancy(self, room_id: RoomId) -> Room:
        """Load a room and confirm it could take one more tenant.

        Nothing is reserved; the check is repeated when a place is taken.

        Raises:
            NotFoundError: If the room does not exist
            ConflictError: If the room is under maintenance or full
        """
        room = await self._load_room(room_id)
        await self._reconciler.refresh_room(room)
        room.ensure_vacancy()
        return room

    async def unassign_tenant(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        notes: str | None = None,
    ) -> AssignmentResult:
        """Unlink a tenant from their room and release the place.

        A tenant without a room is left alone.

        Raises:
            AuthorizationError: If the caller may not manage assignments
            NotFoundError: If the tenant does not exist
            ConflictError: If retries ran out
        """
        require(actor, Action.MANAGE_LEDGER)

        async def work() -> AssignmentResult:
            tenant = await self._load_tenant(tenant_id)
            if tenant.room_id is None:
                return AssignmentResult(tenant=tenant, room=None, changed=False)

            room_id = tenant.unlink_room()
            await self._tenants.save(tenant)

            room = await self._rooms.get_by_id(room_id)
            if room is not None:
                await self._reconciler.refresh_room(room)
                await self._rooms.save(room)
            await self._logs.add(
                RoomAssignmentLog.record(
                    tenant_id=tenant.id,
                    room_id=room_id,
                    action=AssignmentAction.UNASSIGNED,
                    actor_id=actor.user_id,
                    notes=notes,
                )
            )
            return AssignmentResult(tenant=tenant, room=room)

        result = await self._uow.run("unassign_tenant", work)
        if result.changed and result.room is not None:
            self._probe.tenant_unassigned(
                tenant_id=tenant_id.value,
                room_id=result.room.id.value,
                occupant_count=result.room.occupant_count,
            )
        return result

    async def apply_payment(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        amount: Decimal | int | str,
        method: PaymentMethod,
        payment_date: date | None = None,
        reference_number: str | None = None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> PaymentReceipt:
        """Record a payment and bring the tenant's balance up to date.

        The payment commits first, on its own. The balance update is a
        second unit of work; if it fails the payment still stands, the
        receipt reports ``settled=False`` and the next read of the tenant
        reconciles the balance from the ledgers.

        A repeated idempotency key returns the original payment without a
        second ledger entry or a second decrement.

        Raises:
            AuthorizationError: If the caller may not apply payments
            ValidationError: If the amount is not positive
            NotFoundError: If the tenant does not exist
        """
        require(actor, Action.MANAGE_LEDGER)

        payment, created = await self._payment_ledger.record_payment(
            tenant_id=tenant_id,
            amount=amount,
            method=method,
            payment_date=payment_date,
            reference_number=reference_number,
            notes=notes,
            idempotency_key=idempotency_key,
        )

        async def work() -> Tenant:
            tenant = await self._load_tenant(tenant_id)
            balance, status = await self._reconciler.standing(tenant)
            if tenant.settle(balance, status):
                await self._tenants.save(tenant)
            return tenant

        try:
            tenant = await self._uow.run("apply_payment", work)
        except Exception as e:
            self._probe.balance_update_deferred(
                tenant_id=tenant_id.value, payment_id=payment.id.value, error=str(e)
            )
            return PaymentReceipt(
                payment=payment,
                balance=None,
                payment_status=None,
                replayed=not created,
                settled=False,
            )

        self._probe.payment_applied(
            tenant_id=tenant_id.value,
            payment_id=payment.id.value,
            balance=str(tenant.balance),
            payment_status=tenant.payment_status.value,
        )
        return PaymentReceipt(
            payment=payment,
            balance=tenant.balance,
            payment_status=tenant.payment_status,
            replayed=not created,
        )

    async def change_room_type(
        self, actor: CurrentUser, room_id: RoomId, new_type: RoomType
    ) -> Room:
        """Switch a room's type and reset its capacity to the type default.

        Raises:
            AuthorizationError: If the caller may not manage rooms
            NotFoundError: If the room does not exist
            ConflictError: If the new capacity is below the live occupancy
        """
        require(actor, Action.MANAGE_ROOMS)

        async def work() -> Room:
            room = await self._load_room(room_id)
            await self._reconciler.refresh_room(room)
            room.change_type(new_type)
            await self._rooms.save(room)
            return room

        room = await self._uow.run("change_room_type", work)
        self._probe.room_type_changed(
            room_id=room.id.value,
            room_type=room.room_type.value,
            max_occupants=room.max_occupants,
        )
        return room

    async def post_charge(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        amount: Decimal | int | str,
        due_date: date,
        description: str,
    ) -> tuple[Charge, Tenant]:
        """Post a one-off charge and update the tenant's balance with it.

        Raises:
            AuthorizationError: If the caller may not post charges
            ValidationError: If the amount or description is invalid
            NotFoundError: If the tenant does not exist
            ConflictError: If the tenant is archived
        """
        require(actor, Action.MANAGE_LEDGER)
        charge = Charge.post(
            tenant_id=tenant_id,
            amount=amount,
            due_date=due_date,
            description=description,
        )
        return await self._uow.run(
            "post_charge", lambda: self._post_and_settle(charge)
        )

    async def accrue_rent(
        self, actor: CurrentUser, tenant_id: TenantId, period: date
    ) -> tuple[Charge, Tenant]:
        """Charge one month of rent at the tenant's room price.

        ``period`` is normalized to the first of its month; rent falls due
        ``rent_grace_days`` later.

        Raises:
            AuthorizationError: If the caller may not post charges
            NotFoundError: If the tenant does not exist
            ConflictError: If the tenant has no room, or rent for the month
                was already accrued
        """
        require(actor, Action.MANAGE_LEDGER)
        month = first_of_month(period)

        async def work() -> tuple[Charge, Tenant]:
            tenant = await self._load_tenant(tenant_id)
            if tenant.room_id is None:
                raise ConflictError(
                    f"Tenant {tenant_id} has no room to accrue rent for",
                    {"tenant_id": tenant_id.value},
                )
            room = await self._rooms.get_by_id(tenant.room_id)
            if room is None:
                raise NotFoundError(
                    f"Room {tenant.room_id} not found",
                    {"room_id": tenant.room_id.value},
                )
            charge = Charge.post(
                tenant_id=tenant.id,
                amount=room.price_per_month,
                due_date=month + timedelta(days=self._rent_grace_days),
                description=f"Rent for {month:%B %Y}, room {room.number}",
                period=month,
            )
            return await self._post_and_settle(charge, tenant)

        charge, tenant = await self._uow.run("accrue_rent", work)
        self._probe.rent_accrued(
            tenant_id=tenant_id.value,
            period=month.isoformat(),
            amount=str(charge.amount),
        )
        return charge, tenant

    async def list_charges(
        self, actor: CurrentUser, tenant_id: TenantId
    ) -> list[Charge]:
        """List a tenant's charges, oldest due date first.

        Raises:
            NotFoundError: If the tenant does not exist
            AuthorizationError: If the caller may not read this tenant
        """
        async with self._uow.begin():
            tenant = await self._load_tenant(tenant_id)
            require_tenant_access(actor, Action.READ_TENANTS, tenant)
            return await self._charge_ledger.list_charges(tenant_id)

    async def sweep(self, actor: CurrentUser) -> ReconciliationReport:
        """Reconcile every room and active tenant.

        Raises:
            AuthorizationError: If the caller may not run reconciliation
        """
        require(actor, Action.RECONCILE)
        async with self._uow.begin():
            return await self._reconciler.sweep()

    async def _post_and_settle(
        self, charge: Charge, tenant: Tenant | None = None
    ) -> tuple[Charge, Tenant]:
        if tenant is None:
            tenant = await self._load_tenant(charge.tenant_id)
        if tenant.archived:
            raise ConflictError(
                f"Tenant {tenant.id} is archived", {"tenant_id": tenant.id.value}
            )
        await self._charge_ledger.post_charge(charge)
        balance, status = await self._reconciler.standing(tenant)
        if tenant.settle(balance, status):
            await self._tenants.save(tenant)
        return charge, tenant

    async def _assign(
        self,
        actor: CurrentUser,
        tenant: Tenant,
        room: Room,
        notes: str | None,
    ) -> AssignmentResult:
        if tenant.archived:
            raise ConflictError(
                f"Tenant {tenant.id} is archived",
                {"tenant_id": tenant.id.value},
            )
        if tenant.room_id == room.id:
            await self._reconciler.reconcile_room(room)
            return AssignmentResult(tenant=tenant, room=room, changed=False)
        if tenant.room_id is not None:
            raise ConflictError(
                f"Tenant {tenant.id} is already assigned to room "
                f"{tenant.room_id}; unassign first",
                {
                    "tenant_id": tenant.id.value,
                    "room_id": tenant.room_id.value,
                },
            )

        await self._occupy(room)
        tenant.link_room(room.id)
        await self._tenants.save(tenant)
        await self._logs.add(
            RoomAssignmentLog.record(
                tenant_id=tenant.id,
                room_id=room.id,
                action=AssignmentAction.ASSIGNED,
                actor_id=actor.user_id,
                notes=notes,
            )
        )
        return AssignmentResult(tenant=tenant, room=room)

    async def _load_tenant(self, tenant_id: TenantId) -> Tenant:
        tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError(
                f"Tenant {tenant_id} not found", {"tenant_id": tenant_id.value}
            )
        return tenant

    async def _load_room(self, room_id: RoomId) -> Room:
        room = await self._rooms.get_by_id(room_id)
        if room is None:
            raise NotFoundError(f"Room {room_id} not found", {"room_id": room_id.value})
        return room

    async def _occupy(self, room: Room) -> None:
        await self._reconciler.refresh_room(room)
        room.occupy()
        await self._rooms.save(room)
