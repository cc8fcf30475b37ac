"""Aggregates for the tenancy domain."""

from tenancy.domain.aggregates.assignment_log import RoomAssignmentLog
from tenancy.domain.aggregates.charge import Charge
from tenancy.domain.aggregates.maintenance_request import MaintenanceRequest
from tenancy.domain.aggregates.payment import Payment
from tenancy.domain.aggregates.room import Room
from tenancy.domain.aggregates.tenant import Tenant

__all__ = [
    "Charge",
    "MaintenanceRequest",
    "Payment",
    "Room",
    "RoomAssignmentLog",
    "Tenant",
]
