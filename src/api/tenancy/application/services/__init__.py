"""Application services for the tenancy bounded context.

Application services orchestrate domain aggregates and repositories to
fulfill use cases. They are the "front door" to the tenancy context.
"""

from tenancy.application.services.assignment_service import AssignmentService
from tenancy.application.services.maintenance_service import MaintenanceService
from tenancy.application.services.payment_ledger import (
    ChargeLedger,
    PaymentHistory,
    PaymentLedger,
)
from tenancy.application.services.reconciliation import Reconciler
from tenancy.application.services.room_service import RoomService
from tenancy.application.services.tenant_service import TenantService
from tenancy.application.services.unit_of_work import UnitOfWork

__all__ = [
    "AssignmentService",
    "ChargeLedger",
    "MaintenanceService",
    "PaymentHistory",
    "PaymentLedger",
    "Reconciler",
    "RoomService",
    "TenantService",
    "UnitOfWork",
]
