"""Fixtures for tenancy unit tests.

Services are wired over the in-memory repositories, the same way the
dependency layer wires them over a database session.
"""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace
from typing import Callable

import pytest

from tenancy.application.services import (
    AssignmentService,
    ChargeLedger,
    MaintenanceService,
    PaymentLedger,
    Reconciler,
    RoomService,
    TenantService,
    UnitOfWork,
)
from tenancy.application.value_objects import CurrentUser
from tenancy.domain.value_objects import Role, UserId
from tenancy.infrastructure import (
    InMemoryTenancyStore,
    TenancyStorage,
    in_memory_storage,
)

TODAY = date(2025, 3, 15)


def wire_services(
    storage: TenancyStorage,
    clock: Callable[[], date] = lambda: TODAY,
    max_conflict_retries: int = 3,
    page_size: int = 50,
) -> SimpleNamespace:
    uow = UnitOfWork(
        session=storage.transactions, max_conflict_retries=max_conflict_retries
    )
    reconciler = Reconciler(
        room_repository=storage.rooms,
        tenant_repository=storage.tenants,
        payment_repository=storage.payments,
        charge_repository=storage.charges,
        clock=clock,
    )
    payments = PaymentLedger(
        payment_repository=storage.payments,
        tenant_repository=storage.tenants,
        session=storage.transactions,
        clock=clock,
        page_size=page_size,
    )
    charges = ChargeLedger(charge_repository=storage.charges)
    assignments = AssignmentService(
        room_repository=storage.rooms,
        tenant_repository=storage.tenants,
        assignment_log_repository=storage.assignment_logs,
        payment_ledger=payments,
        charge_ledger=charges,
        reconciler=reconciler,
        unit_of_work=uow,
    )
    return SimpleNamespace(
        storage=storage,
        uow=uow,
        reconciler=reconciler,
        payments=payments,
        charges=charges,
        assignments=assignments,
        rooms=RoomService(
            room_repository=storage.rooms, reconciler=reconciler, unit_of_work=uow
        ),
        tenants=TenantService(
            tenant_repository=storage.tenants,
            assignment_log_repository=storage.assignment_logs,
            charge_ledger=charges,
            assignment_service=assignments,
            reconciler=reconciler,
            unit_of_work=uow,
        ),
        maintenance=MaintenanceService(
            maintenance_repository=storage.maintenance_requests,
            tenant_repository=storage.tenants,
            session=storage.transactions,
        ),
    )


@pytest.fixture
def store() -> InMemoryTenancyStore:
    """Empty in-memory store."""
    return InMemoryTenancyStore()


@pytest.fixture
def storage(store: InMemoryTenancyStore) -> TenancyStorage:
    """In-memory repositories with transactional units of work."""
    return in_memory_storage(store)


@pytest.fixture
def services(storage: TenancyStorage) -> SimpleNamespace:
    """Every tenancy service over the same in-memory store."""
    return wire_services(storage)


@pytest.fixture
def wire() -> Callable[..., SimpleNamespace]:
    """Wire services over a custom storage bundle."""
    return wire_services


@pytest.fixture
def admin() -> CurrentUser:
    return CurrentUser(
        user_id=UserId(value="admin-user"), username="admin", role=Role.ADMIN
    )


@pytest.fixture
def staff() -> CurrentUser:
    return CurrentUser(
        user_id=UserId(value="staff-user"), username="staff", role=Role.STAFF
    )


@pytest.fixture
def tenant_user() -> CurrentUser:
    return CurrentUser(
        user_id=UserId(value="tenant-user"), username="resident", role=Role.TENANT
    )


@pytest.fixture
def parent_user() -> CurrentUser:
    return CurrentUser(
        user_id=UserId(value="parent-user"), username="parent", role=Role.PARENT
    )
