"""SQLAlchemy ORM models for the tenancy bounded context.

These models map to database tables and are used by repository implementations.
Only ``rooms.occupant_count`` and ``tenants.balance``/``payment_status`` hold
derived values; reconciliation keeps them in line with the ledger tables.
"""

from tenancy.infrastructure.models.assignment_log import RoomAssignmentLogModel
from tenancy.infrastructure.models.charge import ChargeModel
from tenancy.infrastructure.models.maintenance_request import MaintenanceRequestModel
from tenancy.infrastructure.models.payment import PaymentModel
from tenancy.infrastructure.models.room import RoomAmenityModel, RoomModel
from tenancy.infrastructure.models.tenant import TenantModel

__all__ = [
    "ChargeModel",
    "MaintenanceRequestModel",
    "PaymentModel",
    "RoomAmenityModel",
    "RoomAssignmentLogModel",
    "RoomModel",
    "TenantModel",
]
