"""Infrastructure layer for the tenancy bounded context.

PostgreSQL repositories (SQLAlchemy async) and in-memory repositories
implementing the same ports.
"""

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
from tenancy.infrastructure.storage import (
    TenancyStorage,
    in_memory_storage,
    sql_storage,
)
from tenancy.infrastructure.tenant_repository import TenantRepository

__all__ = [
    "AssignmentLogRepository",
    "ChargeRepository",
    "InMemoryAssignmentLogRepository",
    "InMemoryChargeRepository",
    "InMemoryMaintenanceRequestRepository",
    "InMemoryPaymentRepository",
    "InMemoryRoomRepository",
    "InMemoryTenancyStore",
    "InMemoryTenantRepository",
    "InMemoryTransactionScope",
    "MaintenanceRequestRepository",
    "PaymentRepository",
    "RoomRepository",
    "TenantRepository",
    "TenancyStorage",
    "in_memory_storage",
    "sql_storage",
]
