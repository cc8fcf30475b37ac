"""Ports (interfaces) for the tenancy bounded context.

Ports define the contracts for repositories without specifying
implementation details, so the application layer works unchanged over
PostgreSQL or process memory.
"""

from tenancy.ports.exceptions import (
    DuplicateChargePeriodError,
    DuplicateIdempotencyKeyError,
    DuplicateRoomNumberError,
    StaleVersionError,
)
from tenancy.ports.repositories import (
    IAssignmentLogRepository,
    IChargeRepository,
    IMaintenanceRequestRepository,
    IPaymentRepository,
    IRoomRepository,
    ITenantRepository,
    ITransactionScope,
)

__all__ = [
    "DuplicateChargePeriodError",
    "DuplicateIdempotencyKeyError",
    "DuplicateRoomNumberError",
    "IAssignmentLogRepository",
    "IChargeRepository",
    "IMaintenanceRequestRepository",
    "IPaymentRepository",
    "IRoomRepository",
    "ITenantRepository",
    "ITransactionScope",
    "StaleVersionError",
]
