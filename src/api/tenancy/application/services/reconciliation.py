"""Reconciliation of cached counters against their sources of truth.

``Room.occupant_count`` is a cache of the live count of tenants linked to
the room. ``Tenant.balance`` and ``Tenant.payment_status`` are caches of
charges minus payments. Any partial write leaves them drifting; the
reconciler recomputes them and repairs the stored value.

The reconciler never opens a transaction. Callers run it inside their own
unit of work so the reads and the repair write share one transaction.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable

from tenancy.application.observability import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)
from tenancy.application.value_objects import ReconciliationReport
from tenancy.domain.aggregates import Room, Tenant
from tenancy.domain.billing import (
    compute_balance,
    oldest_outstanding_due_date,
    settle_payment_status,
)
from tenancy.domain.value_objects import PaymentStatus
from tenancy.ports.exceptions import StaleVersionError
from tenancy.ports.repositories import (
    IChargeRepository,
    IPaymentRepository,
    IRoomRepository,
    ITenantRepository,
)


class Reconciler:
    """Recomputes derived fields and repairs drift.

    ``refresh_*`` methods update the aggregate in memory only and report
    whether it changed; write paths call them and then save with the usual
    compare-and-swap so a lost race is retried. ``reconcile_*`` methods are
    for read paths: they refresh and persist the repair, and if another
    writer got there first the repair is simply not persisted. The caller
    still sees the corrected values.
    """

    def __init__(
        self,
        room_repository: IRoomRepository,
        tenant_repository: ITenantRepository,
        payment_repository: IPaymentRepository,
        charge_repository: IChargeRepository,
        probe: ReconciliationProbe | None = None,
        clock: Callable[[], date] = date.today,
    ):
        self._rooms = room_repository
        self._tenants = tenant_repository
        self._payments = payment_repository
        self._charges = charge_repository
        self._probe = probe or DefaultReconciliationProbe()
        self._clock = clock

    async def refresh_room(self, room: Room) -> bool:
        """Replace the room's cached occupant count with the live count."""
        cached = room.occupant_count
        live = await self._tenants.count_by_room(room.id)
        if not room.sync_occupancy(live):
            return False
        self._probe.occupancy_drift_repaired(
            room_id=room.id.value, cached_count=cached, live_count=live
        )
        return True

    async def standing(self, tenant: Tenant) -> tuple[Decimal, PaymentStatus]:
        """Balance and payment status as the ledgers say they should be.

        The status is advanced from the tenant's current cached status.
        """
        total_charged = await self._charges.total_for_tenant(tenant.id)
        total_paid = await self._payments.total_for_tenant(tenant.id)
        balance = compute_balance(total_charged, total_paid)

        oldest_due = None
        if balance > 0:
            charges = await self._charges.list_by_tenant(tenant.id)
            oldest_due = oldest_outstanding_due_date(charges, total_paid)

        status = settle_payment_status(
            tenant.payment_status, balance, oldest_due, self._clock()
        )
        return balance, status

    async def refresh_tenant(self, tenant: Tenant) -> bool:
        """Recompute the tenant's balance and payment status from the ledgers."""
        cached_balance = tenant.balance
        cached_status = tenant.payment_status
        balance, status = await self.standing(tenant)
        if not tenant.settle(balance, status):
            return False
        self._probe.balance_drift_repaired(
            tenant_id=tenant.id.value,
            cached_balance=str(cached_balance),
            balance=str(balance),
            cached_status=cached_status.value,
            payment_status=status.value,
        )
        return True

    async def reconcile_room(self, room: Room) -> bool:
        """Refresh a room and persist the repair if it drifted.

        Returns:
            True if the cached count was wrong
        """
        if not await self.refresh_room(room):
            return False
        try:
            await self._rooms.save(room)
        except StaleVersionError:
            self._probe.repair_write_skipped(entity="room", entity_id=room.id.value)
        return True

    async def reconcile_tenant(self, tenant: Tenant) -> bool:
        """Refresh a tenant and persist the repair if it drifted.

        Returns:
            True if the cached balance or status was wrong
        """
        if not await self.refresh_tenant(tenant):
            return False
        try:
            await self._tenants.save(tenant)
        except StaleVersionError:
            self._probe.repair_write_skipped(
                entity="tenant", entity_id=tenant.id.value
            )
        return True

    async def sweep(self) -> ReconciliationReport:
        """Reconcile every room and every active tenant."""
        rooms = await self._rooms.list_all()
        rooms_repaired = [
            room.id.value for room in rooms if await self.reconcile_room(room)
        ]

        tenants = [t for t in await self._tenants.list_all() if not t.archived]
        tenants_repaired = [
            tenant.id.value
            for tenant in tenants
            if await self.reconcile_tenant(tenant)
        ]

        report = ReconciliationReport(
            rooms_checked=len(rooms),
            tenants_checked=len(tenants),
            rooms_repaired=rooms_repaired,
            tenants_repaired=tenants_repaired,
        )
        self._probe.sweep_completed(
            rooms_checked=report.rooms_checked,
            tenants_checked=report.tenants_checked,
            rooms_repaired=len(rooms_repaired),
            tenants_repaired=len(tenants_repaired),
        )
        return report
