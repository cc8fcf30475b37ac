"""Tests for AssignmentService over the in-memory repositories.

These exercise the cross-entity invariants: occupancy always matches the
tenants linked to a room, capacity is never exceeded, and a tenant's
balance is always charges minus payments.
"""

import asyncio
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from tenancy.domain.value_objects import (
    AssignmentAction,
    PaymentMethod,
    PaymentStatus,
    RoomId,
    RoomStatus,
    RoomType,
    TenantId,
)
from tenancy.infrastructure import (
    InMemoryRoomRepository,
    InMemoryTenantRepository,
    in_memory_storage,
)
from tenancy.ports.exceptions import StaleVersionError

LEASE_START = date(2025, 4, 1)
LEASE_END = date(2026, 3, 31)


async def add_room(services, actor, number="101", room_type=RoomType.DOUBLE, **kw):
    return await services.rooms.create_room(
        actor,
        number=number,
        floor="1",
        room_type=room_type,
        price_per_month=kw.pop("price_per_month", "450"),
        **kw,
    )


async def add_tenant(services, actor, name="Ada", **kw):
    return await services.tenants.create_tenant(
        actor,
        name=name,
        email=f"{name.lower()}@example.com",
        lease_start=LEASE_START,
        lease_end=LEASE_END,
        **kw,
    )


async def live_count(storage, room_id: RoomId) -> int:
    return await storage.tenants.count_by_room(room_id)


class TestAssignTenantToRoom:
    """Tests for assign_tenant_to_room."""

    @pytest.mark.asyncio
    async def test_assign_links_tenant_and_takes_a_place(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)

        result = await services.assignments.assign_tenant_to_room(
            admin, tenant.id, room.id
        )

        assert result.changed is True
        assert result.tenant.room_id == room.id
        assert result.room.occupant_count == 1
        assert result.room.status == RoomStatus.PARTIALLY_OCCUPIED

        stored_room = await services.storage.rooms.get_by_id(room.id)
        assert stored_room.occupant_count == await live_count(
            services.storage, room.id
        )

    @pytest.mark.asyncio
    async def test_assign_writes_audit_log(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)

        await services.assignments.assign_tenant_to_room(
            admin, tenant.id, room.id, notes="Moved in"
        )

        entries = await services.storage.assignment_logs.list_by_tenant(tenant.id)
        assert len(entries) == 1
        assert entries[0].action == AssignmentAction.ASSIGNED
        assert entries[0].actor_id == admin.user_id
        assert entries[0].notes == "Moved in"

    @pytest.mark.asyncio
    async def test_full_room_rejects_assignment(self, services, admin):
        room = await add_room(services, admin, room_type=RoomType.SINGLE)
        first = await add_tenant(services, admin, name="Ada")
        second = await add_tenant(services, admin, name="Grace")
        await services.assignments.assign_tenant_to_room(admin, first.id, room.id)

        with pytest.raises(ConflictError):
            await services.assignments.assign_tenant_to_room(
                admin, second.id, room.id
            )

        stored = await services.storage.tenants.get_by_id(second.id)
        assert stored.room_id is None
        assert await live_count(services.storage, room.id) == 1

    @pytest.mark.asyncio
    async def test_room_under_maintenance_rejects_assignment(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        await services.rooms.update_room(admin, room.id, {"under_maintenance": True})

        with pytest.raises(ConflictError):
            await services.assignments.assign_tenant_to_room(
                admin, tenant.id, room.id
            )

    @pytest.mark.asyncio
    async def test_reassigning_same_room_is_a_no_op(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        result = await services.assignments.assign_tenant_to_room(
            admin, tenant.id, room.id
        )

        assert result.changed is False
        assert result.room.occupant_count == 1

    @pytest.mark.asyncio
    async def test_tenant_in_another_room_must_unassign_first(self, services, admin):
        first_room = await add_room(services, admin, number="101")
        second_room = await add_room(services, admin, number="102")
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(
            admin, tenant.id, first_room.id
        )

        with pytest.raises(ConflictError):
            await services.assignments.assign_tenant_to_room(
                admin, tenant.id, second_room.id
            )

        assert await live_count(services.storage, second_room.id) == 0

    @pytest.mark.asyncio
    async def test_missing_room_is_not_found(self, services, admin):
        tenant = await add_tenant(services, admin)
        with pytest.raises(NotFoundError):
            await services.assignments.assign_tenant_to_room(
                admin, tenant.id, RoomId.generate()
            )

    @pytest.mark.asyncio
    async def test_staff_may_not_assign(self, services, admin, staff):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        with pytest.raises(AuthorizationError):
            await services.assignments.assign_tenant_to_room(
                staff, tenant.id, room.id
            )

    @pytest.mark.asyncio
    async def test_concurrent_assignments_never_exceed_capacity(
        self, services, admin
    ):
        room = await add_room(services, admin, room_type=RoomType.DOUBLE)
        tenants = [
            await add_tenant(services, admin, name=name)
            for name in ("Ada", "Grace", "Hedy", "Joan")
        ]

        results = await asyncio.gather(
            *(
                services.assignments.assign_tenant_to_room(admin, t.id, room.id)
                for t in tenants
            ),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        failed = [r for r in results if isinstance(r, Exception)]
        assert len(succeeded) == 2
        assert all(isinstance(e, ConflictError) for e in failed)

        stored = await services.storage.rooms.get_by_id(room.id)
        assert stored.occupant_count == 2
        assert await live_count(services.storage, room.id) == 2
        assert stored.status == RoomStatus.FULL


class TestRoomApplications:
    """Tests for approve_room_application."""

    @pytest.mark.asyncio
    async def test_approval_assigns_requested_room(self, services, admin, tenant_user):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, tenant_user, room_id=room.id)

        result = await services.assignments.approve_room_application(
            admin, tenant.id
        )

        assert result.changed is True
        assert result.tenant.room_id == room.id
        assert result.tenant.requested_room_id is None
        assert result.room.occupant_count == 1
        stored = await services.storage.tenants.get_by_id(tenant.id)
        assert stored.room_id == room.id
        assert stored.requested_room_id is None
        entries = await services.storage.assignment_logs.list_by_tenant(tenant.id)
        assert [e.action for e in entries] == [AssignmentAction.ASSIGNED]
        assert entries[0].actor_id == admin.user_id
        assert entries[0].notes == "Room application approved"

    @pytest.mark.asyncio
    async def test_approval_into_full_room_keeps_application(
        self, services, admin, tenant_user
    ):
        room = await add_room(services, admin, room_type=RoomType.SINGLE)
        applicant = await add_tenant(services, tenant_user, room_id=room.id)
        occupant = await add_tenant(services, admin, name="Grace")
        await services.assignments.assign_tenant_to_room(admin, occupant.id, room.id)

        with pytest.raises(ConflictError):
            await services.assignments.approve_room_application(admin, applicant.id)

        stored = await services.storage.tenants.get_by_id(applicant.id)
        assert stored.room_id is None
        assert stored.requested_room_id == room.id
        assert await live_count(services.storage, room.id) == 1

    @pytest.mark.asyncio
    async def test_tenant_without_application_conflicts(self, services, admin):
        tenant = await add_tenant(services, admin)

        with pytest.raises(ConflictError):
            await services.assignments.approve_room_application(admin, tenant.id)

    @pytest.mark.asyncio
    async def test_tenant_may_not_approve_own_application(
        self, services, admin, tenant_user
    ):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, tenant_user, room_id=room.id)

        with pytest.raises(AuthorizationError):
            await services.assignments.approve_room_application(
                tenant_user, tenant.id
            )

        stored = await services.storage.tenants.get_by_id(tenant.id)
        assert stored.room_id is None

    @pytest.mark.asyncio
    async def test_direct_assignment_settles_application(
        self, services, admin, tenant_user
    ):
        requested = await add_room(services, admin, number="101")
        other = await add_room(services, admin, number="102")
        tenant = await add_tenant(services, tenant_user, room_id=requested.id)

        result = await services.assignments.assign_tenant_to_room(
            admin, tenant.id, other.id
        )

        assert result.tenant.room_id == other.id
        assert result.tenant.requested_room_id is None


class TestUnassignTenant:
    """Tests for unassign_tenant."""

    @pytest.mark.asyncio
    async def test_unassign_releases_the_place(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        result = await services.assignments.unassign_tenant(admin, tenant.id)

        assert result.changed is True
        assert result.tenant.room_id is None
        assert result.room.occupant_count == 0
        assert result.room.status == RoomStatus.AVAILABLE

        entries = await services.storage.assignment_logs.list_by_tenant(tenant.id)
        assert [e.action for e in entries] == [
            AssignmentAction.ASSIGNED,
            AssignmentAction.UNASSIGNED,
        ]

    @pytest.mark.asyncio
    async def test_unassign_without_room_is_a_no_op(self, services, admin):
        tenant = await add_tenant(services, admin)

        result = await services.assignments.unassign_tenant(admin, tenant.id)

        assert result.changed is False
        assert result.room is None
        assert await services.storage.assignment_logs.list_by_tenant(tenant.id) == []


class TestApplyPayment:
    """Tests for apply_payment and idempotency keys."""

    @pytest.mark.asyncio
    async def test_payment_reduces_balance(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="500")

        receipt = await services.assignments.apply_payment(
            admin, tenant.id, amount="200", method=PaymentMethod.CASH
        )

        assert receipt.settled is True
        assert receipt.replayed is False
        assert receipt.balance == Decimal("300.00")
        assert receipt.payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_paying_in_full_marks_paid(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="500")

        receipt = await services.assignments.apply_payment(
            admin, tenant.id, amount="500", method=PaymentMethod.BANK_TRANSFER
        )

        assert receipt.balance == Decimal("0.00")
        assert receipt.payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_overpayment_leaves_credit_and_paid(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="3000")

        receipt = await services.assignments.apply_payment(
            admin, tenant.id, amount="5000", method=PaymentMethod.CASH
        )

        assert receipt.balance == Decimal("-2000.00")
        assert receipt.payment_status == PaymentStatus.PAID
        stored = await services.storage.tenants.get_by_id(tenant.id)
        assert stored.balance == Decimal("-2000.00")
        assert stored.payment_status == PaymentStatus.PAID

    @pytest.mark.asyncio
    async def test_settling_payment_appears_once_in_history(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="5000")

        receipt = await services.assignments.apply_payment(
            admin, tenant.id, amount="5000", method=PaymentMethod.BANK_TRANSFER
        )

        assert receipt.balance == Decimal("0.00")
        assert receipt.payment_status == PaymentStatus.PAID
        history = await services.payments.list_payments(admin, tenant.id)
        payments = await history.to_list()
        assert [p.amount for p in payments] == [Decimal("5000.00")]
        assert payments[0].id == receipt.payment.id

    @pytest.mark.asyncio
    async def test_same_key_records_once_and_decrements_once(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="500")

        first = await services.assignments.apply_payment(
            admin,
            tenant.id,
            amount="100",
            method=PaymentMethod.CASH,
            idempotency_key="receipt-42",
        )
        second = await services.assignments.apply_payment(
            admin,
            tenant.id,
            amount="100",
            method=PaymentMethod.CASH,
            idempotency_key="receipt-42",
        )

        assert second.replayed is True
        assert second.payment.id == first.payment.id
        assert second.balance == Decimal("400.00")
        assert await services.payments.total_paid(tenant.id) == Decimal("100.00")
        history = await services.payments.list_payments(admin, tenant.id)
        assert len(await history.to_list()) == 1

    @pytest.mark.asyncio
    async def test_without_key_every_call_is_a_new_payment(self, services, admin):
        tenant = await add_tenant(services, admin, opening_charge="500")

        for _ in range(2):
            await services.assignments.apply_payment(
                admin, tenant.id, amount="100", method=PaymentMethod.CASH
            )

        assert await services.payments.total_paid(tenant.id) == Decimal("200.00")
        stored = await services.storage.tenants.get_by_id(tenant.id)
        assert stored.balance == Decimal("300.00")

    @pytest.mark.asyncio
    async def test_non_positive_amount_is_rejected_before_writing(
        self, services, admin
    ):
        tenant = await add_tenant(services, admin)

        with pytest.raises(ValidationError):
            await services.assignments.apply_payment(
                admin, tenant.id, amount="0", method=PaymentMethod.CASH
            )

        assert await services.payments.total_paid(tenant.id) == Decimal("0.00")

    @pytest.mark.asyncio
    async def test_unknown_tenant_is_not_found(self, services, admin):
        with pytest.raises(NotFoundError):
            await services.assignments.apply_payment(
                admin, TenantId.generate(), amount="10", method=PaymentMethod.CASH
            )

    @pytest.mark.asyncio
    async def test_balance_always_equals_charges_minus_payments(
        self, services, admin
    ):
        room = await add_room(services, admin, price_per_month="450")
        tenant = await add_tenant(services, admin, opening_charge="200")
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)
        await services.assignments.accrue_rent(admin, tenant.id, date(2025, 4, 1))
        await services.assignments.post_charge(
            admin,
            tenant.id,
            amount="35",
            due_date=date(2025, 4, 20),
            description="Key replacement",
        )
        await services.assignments.apply_payment(
            admin, tenant.id, amount="300", method=PaymentMethod.CASH
        )

        stored = await services.storage.tenants.get_by_id(tenant.id)
        charged = await services.charges.total_charged(tenant.id)
        paid = await services.payments.total_paid(tenant.id)
        assert charged == Decimal("685.00")
        assert stored.balance == charged - paid == Decimal("385.00")


class TestCharges:
    """Tests for post_charge and accrue_rent."""

    @pytest.mark.asyncio
    async def test_accrue_rent_charges_room_price(self, services, admin):
        room = await add_room(services, admin, price_per_month="450")
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        charge, updated = await services.assignments.accrue_rent(
            admin, tenant.id, date(2025, 5, 17)
        )

        assert charge.amount == Decimal("450.00")
        assert charge.period == date(2025, 5, 1)
        assert charge.due_date == date(2025, 5, 6)
        assert updated.balance == Decimal("450.00")
        assert updated.payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_past_due_rent_makes_tenant_overdue(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        # Due 2025-03-06, before the test clock's 2025-03-15.
        _, updated = await services.assignments.accrue_rent(
            admin, tenant.id, date(2025, 3, 1)
        )

        assert updated.payment_status == PaymentStatus.OVERDUE

    @pytest.mark.asyncio
    async def test_partial_payment_keeps_overdue(self, services, admin):
        room = await add_room(services, admin, price_per_month="450")
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)
        await services.assignments.accrue_rent(admin, tenant.id, date(2025, 3, 1))

        receipt = await services.assignments.apply_payment(
            admin, tenant.id, amount="100", method=PaymentMethod.CASH
        )

        assert receipt.balance == Decimal("350.00")
        assert receipt.payment_status == PaymentStatus.OVERDUE

    @pytest.mark.asyncio
    async def test_rent_for_a_month_is_accrued_once(self, services, admin):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)
        await services.assignments.accrue_rent(admin, tenant.id, date(2025, 5, 1))

        with pytest.raises(ConflictError):
            await services.assignments.accrue_rent(admin, tenant.id, date(2025, 5, 20))

        assert await services.charges.total_charged(tenant.id) == Decimal("450.00")

    @pytest.mark.asyncio
    async def test_accrue_rent_requires_a_room(self, services, admin):
        tenant = await add_tenant(services, admin)
        with pytest.raises(ConflictError):
            await services.assignments.accrue_rent(admin, tenant.id, date(2025, 5, 1))

    @pytest.mark.asyncio
    async def test_list_charges_oldest_first(self, services, admin):
        tenant = await add_tenant(services, admin)
        for due in (date(2025, 6, 1), date(2025, 4, 1)):
            await services.assignments.post_charge(
                admin, tenant.id, amount="10", due_date=due, description="Fee"
            )

        charges = await services.assignments.list_charges(admin, tenant.id)

        assert [c.due_date for c in charges] == [date(2025, 4, 1), date(2025, 6, 1)]


class TestChangeRoomType:
    """Tests for change_room_type."""

    @pytest.mark.asyncio
    async def test_capacity_follows_type(self, services, admin):
        room = await add_room(services, admin, room_type=RoomType.SINGLE)

        updated = await services.assignments.change_room_type(
            admin, room.id, RoomType.TRIPLE
        )

        assert updated.max_occupants == 3

    @pytest.mark.asyncio
    async def test_cannot_shrink_below_occupancy(self, services, admin):
        room = await add_room(services, admin, room_type=RoomType.DOUBLE)
        for name in ("Ada", "Grace"):
            tenant = await add_tenant(services, admin, name=name)
            await services.assignments.assign_tenant_to_room(
                admin, tenant.id, room.id
            )

        with pytest.raises(ConflictError):
            await services.assignments.change_room_type(
                admin, room.id, RoomType.SINGLE
            )

        stored = await services.storage.rooms.get_by_id(room.id)
        assert stored.room_type == RoomType.DOUBLE
        assert stored.max_occupants == 2


class StaleOnceRoomRepository(InMemoryRoomRepository):
    """Loses the first N compare-and-swap writes to a phantom writer."""

    def __init__(self, store, failures: int):
        super().__init__(store)
        self.failures = failures
        self.attempts = 0

    async def save(self, room):
        self.attempts += 1
        if self.attempts <= self.failures:
            raise StaleVersionError("Room", room.id.value, room.version)
        await super().save(room)


class BrokenTenantRepository(InMemoryTenantRepository):
    """Fails every write after the initial insert."""

    async def save(self, tenant):
        raise RuntimeError("storage unavailable")


class TestConcurrencyRetries:
    """Stale writes are retried a bounded number of times."""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self, store, storage, wire, admin):
        setup = wire(storage)
        room = await add_room(setup, admin)
        tenant = await add_tenant(setup, admin)

        flaky = StaleOnceRoomRepository(store, failures=2)
        services = wire(replace(storage, rooms=flaky), max_conflict_retries=3)

        result = await services.assignments.assign_tenant_to_room(
            admin, tenant.id, room.id
        )

        assert result.changed is True
        assert flaky.attempts == 3
        assert await live_count(storage, room.id) == 1

    @pytest.mark.asyncio
    async def test_exhausted_retries_surface_conflict(
        self, store, storage, wire, admin
    ):
        setup = wire(storage)
        room = await add_room(setup, admin)
        tenant = await add_tenant(setup, admin)

        flaky = StaleOnceRoomRepository(store, failures=10)
        services = wire(replace(storage, rooms=flaky), max_conflict_retries=2)

        with pytest.raises(ConflictError):
            await services.assignments.assign_tenant_to_room(
                admin, tenant.id, room.id
            )

        assert flaky.attempts == 3
        stored = await storage.tenants.get_by_id(tenant.id)
        assert stored.room_id is None
        assert (await storage.rooms.get_by_id(room.id)).occupant_count == 0


class TestPartialWritesConverge:
    """Failures between writes leave caches that the next read repairs."""

    @pytest.mark.asyncio
    async def test_room_count_repaired_after_failed_tenant_write(
        self, store, services, wire, admin
    ):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin)

        non_atomic = in_memory_storage(store, atomic=False)
        broken = wire(replace(non_atomic, tenants=BrokenTenantRepository(store)))
        with pytest.raises(RuntimeError):
            await broken.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        # The room write landed, the tenant link did not.
        drifted = await services.storage.rooms.get_by_id(room.id)
        assert drifted.occupant_count == 1

        healed = await services.rooms.get_room(admin, room.id)
        assert healed.occupant_count == 0
        assert healed.status == RoomStatus.AVAILABLE
        stored = await services.storage.rooms.get_by_id(room.id)
        assert stored.occupant_count == 0

    @pytest.mark.asyncio
    async def test_payment_survives_failed_balance_update(
        self, store, storage, services, wire, admin
    ):
        tenant = await add_tenant(services, admin, opening_charge="500")

        broken = wire(replace(storage, tenants=BrokenTenantRepository(store)))
        receipt = await broken.assignments.apply_payment(
            admin, tenant.id, amount="200", method=PaymentMethod.CASH
        )

        assert receipt.settled is False
        assert receipt.balance is None
        assert await services.payments.total_paid(tenant.id) == Decimal("200.00")
        stale = await storage.tenants.get_by_id(tenant.id)
        assert stale.balance == Decimal("500.00")

        healed = await services.tenants.get_tenant(admin, tenant.id)
        assert healed.balance == Decimal("300.00")
        assert healed.payment_status == PaymentStatus.PENDING

    @pytest.mark.asyncio
    async def test_sweep_repairs_everything_and_is_idempotent(
        self, store, services, admin
    ):
        room = await add_room(services, admin)
        tenant = await add_tenant(services, admin, opening_charge="120")
        await services.assignments.assign_tenant_to_room(admin, tenant.id, room.id)

        store.rooms[room.id.value].occupant_count = 2
        store.tenants[tenant.id.value].balance = Decimal("0.00")

        report = await services.assignments.sweep(admin)

        assert report.rooms_checked == 1
        assert report.tenants_checked == 1
        assert report.rooms_repaired == [room.id.value]
        assert report.tenants_repaired == [tenant.id.value]
        assert store.rooms[room.id.value].occupant_count == 1
        assert store.tenants[tenant.id.value].balance == Decimal("120.00")

        again = await services.assignments.sweep(admin)
        assert again.rooms_repaired == []
        assert again.tenants_repaired == []

    @pytest.mark.asyncio
    async def test_sweep_is_admin_only(self, services, staff):
        with pytest.raises(AuthorizationError):
            await services.assignments.sweep(staff)
