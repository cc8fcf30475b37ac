"""Storage backends for the tenancy bounded context.

A TenancyStorage bundles one implementation of every repository port with
the transaction scope they share. Services are wired from a bundle and do
not know which backend they run on.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.infrastructure.assignment_log_repository import AssignmentLogRepository
from tenancy.infrastructure.charge_repository import ChargeRepository
from tenancy.infrastructure.in_memory import (
    InMemoryAssignmentLogRepository,
    InMemoryChargeRepository,
    InMemoryMaintenanceRequestRepository,
    InMemoryPaymentRepository,
    InMemoryRoomRepository,
    InMemoryTenancyStore,
    InMemoryTenantRepository,
    InMemoryTransactionScope,
)
from tenancy.infrastructure.maintenance_request_repository import (
    MaintenanceRequestRepository,
)
from tenancy.infrastructure.payment_repository import PaymentRepository
from tenancy.infrastructure.room_repository import RoomRepository
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.ports.repositories import (
    IAssignmentLogRepository,
    IChargeRepository,
    IMaintenanceRequestRepository,
    IPaymentRepository,
    IRoomRepository,
    ITenantRepository,
    ITransactionScope,
)


@dataclass(frozen=True)
class TenancyStorage:
    """Repositories plus the transaction scope they write through."""

    transactions: ITransactionScope
    rooms: IRoomRepository
    tenants: ITenantRepository
    payments: IPaymentRepository
    charges: IChargeRepository
    maintenance_requests: IMaintenanceRequestRepository
    assignment_logs: IAssignmentLogRepository


def sql_storage(session: AsyncSession) -> TenancyStorage:
    """PostgreSQL repositories sharing one session."""
    return TenancyStorage(
        transactions=session,
        rooms=RoomRepository(session=session),
        tenants=TenantRepository(session=session),
        payments=PaymentRepository(session=session),
        charges=ChargeRepository(session=session),
        maintenance_requests=MaintenanceRequestRepository(session=session),
        assignment_logs=AssignmentLogRepository(session=session),
    )


def in_memory_storage(
    store: InMemoryTenancyStore, atomic: bool = True
) -> TenancyStorage:
    """In-memory repositories over a shared store.

    Args:
        store: The process-local store
        atomic: Roll back failed units of work (see InMemoryTransactionScope)
    """
    return TenancyStorage(
        transactions=InMemoryTransactionScope(store, atomic=atomic),
        rooms=InMemoryRoomRepository(store),
        tenants=InMemoryTenantRepository(store),
        payments=InMemoryPaymentRepository(store),
        charges=InMemoryChargeRepository(store),
        maintenance_requests=InMemoryMaintenanceRequestRepository(store),
        assignment_logs=InMemoryAssignmentLogRepository(store),
    )
