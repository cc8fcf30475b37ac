"""In-memory implementations of the tenancy repository protocols.

These back development runs (``TENANCY_STORAGE_BACKEND=memory``) and the
invariant tests. All repositories share one InMemoryTenancyStore; an
InMemoryTransactionScope over the same store provides units of work.

Aggregates are copied on the way in and on the way out, so callers never
hold a reference into the store and a write only takes effect through the
repository, the same as with a database.

Thread-safety: units of work are serialized with an asyncio lock, which is
sufficient within one event loop. This implementation is NOT safe across
threads or processes.
"""

from __future__ import annotations

import asyncio
import copy
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from decimal import Decimal
from typing import AsyncIterator

from tenancy.domain.aggregates import (
    Charge,
    MaintenanceRequest,
    Payment,
    Room,
    RoomAssignmentLog,
    Tenant,
)
from tenancy.domain.exceptions import ConflictError
from tenancy.domain.value_objects import (
    MaintenanceRequestId,
    MaintenanceStatus,
    RoomId,
    TenantId,
    UserId,
)
from tenancy.ports.exceptions import (
    DuplicateChargePeriodError,
    DuplicateIdempotencyKeyError,
    DuplicateRoomNumberError,
    StaleVersionError,
)

ZERO = Decimal("0.00")


@dataclass
class InMemoryTenancyStore:
    """Process-local storage shared by the in-memory repositories."""

    rooms: dict[str, Room] = field(default_factory=dict)
    tenants: dict[str, Tenant] = field(default_factory=dict)
    payments: dict[str, Payment] = field(default_factory=dict)
    charges: dict[str, Charge] = field(default_factory=dict)
    maintenance_requests: dict[str, MaintenanceRequest] = field(default_factory=dict)
    assignment_logs: list[RoomAssignmentLog] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def snapshot(self) -> dict:
        return copy.deepcopy(
            {
                "rooms": self.rooms,
                "tenants": self.tenants,
                "payments": self.payments,
                "charges": self.charges,
                "maintenance_requests": self.maintenance_requests,
                "assignment_logs": self.assignment_logs,
            }
        )

    def restore(self, snapshot: dict) -> None:
        for name, value in snapshot.items():
            setattr(self, name, value)


class InMemoryTransactionScope:
    """Transaction scope over an InMemoryTenancyStore.

    With ``atomic=True`` (the default) a unit of work that raises is rolled
    back to the state it started from. With ``atomic=False`` writes made
    before the failure are kept, which models storage without cross-table
    transactions and lets tests inject partial writes.
    """

    def __init__(self, store: InMemoryTenancyStore, atomic: bool = True):
        self._store = store
        self._atomic = atomic

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[None]:
        async with self._store.lock:
            snapshot = self._store.snapshot() if self._atomic else None
            try:
                yield
            except BaseException:
                if snapshot is not None:
                    self._store.restore(snapshot)
                raise


class InMemoryRoomRepository:
    """In-memory storage for rooms with compare-and-swap writes."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, room: Room) -> None:
        self._check_number(room)
        self._store.rooms[room.id.value] = copy.deepcopy(room)

    async def save(self, room: Room) -> None:
        stored = self._store.rooms.get(room.id.value)
        if stored is None or stored.version != room.version:
            raise StaleVersionError("Room", room.id.value, room.version)
        self._check_number(room)
        room.version += 1
        self._store.rooms[room.id.value] = copy.deepcopy(room)

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        room = self._store.rooms.get(room_id.value)
        return copy.deepcopy(room) if room is not None else None

    async def get_by_number(self, number: str) -> Room | None:
        for room in self._store.rooms.values():
            if room.number == number:
                return copy.deepcopy(room)
        return None

    async def list_all(self) -> list[Room]:
        rooms = sorted(self._store.rooms.values(), key=lambda r: r.number)
        return [copy.deepcopy(room) for room in rooms]

    async def delete(self, room: Room) -> bool:
        stored = self._store.rooms.get(room.id.value)
        if stored is None:
            return False
        if stored.version != room.version:
            raise StaleVersionError("Room", room.id.value, room.version)
        del self._store.rooms[room.id.value]
        for tenant in self._store.tenants.values():
            if tenant.requested_room_id == room.id:
                tenant.requested_room_id = None
        return True

    def _check_number(self, room: Room) -> None:
        for other in self._store.rooms.values():
            if other.number == room.number and other.id != room.id:
                raise DuplicateRoomNumberError(
                    f"Room number '{room.number}' already exists",
                    {"field": "number", "number": room.number},
                )


class InMemoryTenantRepository:
    """In-memory storage for tenants with compare-and-swap writes."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, tenant: Tenant) -> None:
        self._check_user(tenant)
        self._store.tenants[tenant.id.value] = copy.deepcopy(tenant)

    async def save(self, tenant: Tenant) -> None:
        stored = self._store.tenants.get(tenant.id.value)
        if stored is None or stored.version != tenant.version:
            raise StaleVersionError("Tenant", tenant.id.value, tenant.version)
        self._check_user(tenant)
        tenant.version += 1
        self._store.tenants[tenant.id.value] = copy.deepcopy(tenant)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        tenant = self._store.tenants.get(tenant_id.value)
        return copy.deepcopy(tenant) if tenant is not None else None

    async def get_by_user_id(self, user_id: UserId) -> Tenant | None:
        for tenant in self._store.tenants.values():
            if tenant.user_id == user_id:
                return copy.deepcopy(tenant)
        return None

    async def list_all(self) -> list[Tenant]:
        tenants = sorted(self._store.tenants.values(), key=lambda t: t.name)
        return [copy.deepcopy(tenant) for tenant in tenants]

    async def count_by_room(self, room_id: RoomId) -> int:
        return sum(1 for t in self._store.tenants.values() if t.room_id == room_id)

    def _check_user(self, tenant: Tenant) -> None:
        if tenant.user_id is None:
            return
        for other in self._store.tenants.values():
            if other.user_id == tenant.user_id and other.id != tenant.id:
                raise ConflictError(
                    f"User {tenant.user_id} already has a tenant record",
                    {"user_id": tenant.user_id.value},
                )


class InMemoryPaymentRepository:
    """Append-only in-memory payment storage."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, payment: Payment) -> None:
        if payment.idempotency_key is not None:
            existing = await self.get_by_idempotency_key(
                payment.tenant_id, payment.idempotency_key
            )
            if existing is not None:
                raise DuplicateIdempotencyKeyError(
                    "Payment with this idempotency key already exists",
                    {"idempotency_key": payment.idempotency_key},
                )
        self._store.payments[payment.id.value] = payment

    async def get_by_idempotency_key(
        self, tenant_id: TenantId, key: str
    ) -> Payment | None:
        for payment in self._store.payments.values():
            if payment.tenant_id == tenant_id and payment.idempotency_key == key:
                return payment
        return None

    async def list_page(
        self,
        tenant_id: TenantId,
        limit: int,
        after: Payment | None = None,
    ) -> list[Payment]:
        ordered = sorted(
            (p for p in self._store.payments.values() if p.tenant_id == tenant_id),
            key=_payment_sort_key,
            reverse=True,
        )
        if after is not None:
            cursor = _payment_sort_key(after)
            ordered = [p for p in ordered if _payment_sort_key(p) < cursor]
        return ordered[:limit]

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        return sum(
            (p.amount for p in self._store.payments.values() if p.tenant_id == tenant_id),
            ZERO,
        )


class InMemoryChargeRepository:
    """Append-only in-memory charge storage."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, charge: Charge) -> None:
        if charge.period is not None:
            for other in self._store.charges.values():
                if other.tenant_id == charge.tenant_id and other.period == charge.period:
                    raise DuplicateChargePeriodError(
                        f"Rent for {charge.period:%B %Y} was already accrued",
                        {
                            "tenant_id": charge.tenant_id.value,
                            "period": charge.period.isoformat(),
                        },
                    )
        self._store.charges[charge.id.value] = charge

    async def list_by_tenant(self, tenant_id: TenantId) -> list[Charge]:
        return sorted(
            (c for c in self._store.charges.values() if c.tenant_id == tenant_id),
            key=lambda c: (c.due_date, c.posted_at),
        )

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        return sum(
            (c.amount for c in self._store.charges.values() if c.tenant_id == tenant_id),
            ZERO,
        )


class InMemoryMaintenanceRequestRepository:
    """In-memory storage for maintenance requests."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, request: MaintenanceRequest) -> None:
        self._store.maintenance_requests[request.id.value] = copy.deepcopy(request)

    async def save(self, request: MaintenanceRequest) -> None:
        self._store.maintenance_requests[request.id.value] = copy.deepcopy(request)

    async def get_by_id(
        self, request_id: MaintenanceRequestId
    ) -> MaintenanceRequest | None:
        request = self._store.maintenance_requests.get(request_id.value)
        return copy.deepcopy(request) if request is not None else None

    async def list_matching(
        self,
        status: MaintenanceStatus | None = None,
        room_id: RoomId | None = None,
        tenant_id: TenantId | None = None,
    ) -> list[MaintenanceRequest]:
        matching = [
            r
            for r in self._store.maintenance_requests.values()
            if (status is None or r.status == status)
            and (room_id is None or r.room_id == room_id)
            and (tenant_id is None or r.tenant_id == tenant_id)
        ]
        matching.sort(key=lambda r: (r.submitted_at, r.id.value), reverse=True)
        return [copy.deepcopy(r) for r in matching]


class InMemoryAssignmentLogRepository:
    """Append-only in-memory assignment log."""

    def __init__(self, store: InMemoryTenancyStore) -> None:
        self._store = store

    async def add(self, entry: RoomAssignmentLog) -> None:
        self._store.assignment_logs.append(entry)

    async def list_by_tenant(self, tenant_id: TenantId) -> list[RoomAssignmentLog]:
        return [e for e in self._store.assignment_logs if e.tenant_id == tenant_id]


def _payment_sort_key(payment: Payment) -> tuple:
    return (payment.payment_date, payment.id.value)
