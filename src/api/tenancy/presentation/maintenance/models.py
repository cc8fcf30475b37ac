"""Pydantic models for maintenance request API requests and responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from tenancy.domain.aggregates import MaintenanceRequest
from tenancy.domain.value_objects import MaintenancePriority, MaintenanceStatus


class SubmitMaintenanceRequest(BaseModel):
    """Request model for filing a maintenance request.

    The request is filed against the tenant's current room.
    """

    tenant_id: str = Field(..., description="Tenant filing the request")
    title: str = Field(..., description="Short summary", min_length=1, max_length=255)
    description: str = Field(default="", description="Details")
    priority: MaintenancePriority = Field(
        default=MaintenancePriority.MEDIUM, description="Urgency"
    )


class UpdateMaintenanceStatusRequest(BaseModel):
    """Request model for moving a request through its lifecycle."""

    status: MaintenanceStatus = Field(..., description="New status")


class MaintenanceRequestResponse(BaseModel):
    """Response model for a maintenance request."""

    id: str = Field(..., description="Request ID (ULID format)")
    tenant_id: str = Field(..., description="Tenant who filed it")
    room_id: str = Field(..., description="Room it concerns")
    title: str
    description: str
    priority: MaintenancePriority
    status: MaintenanceStatus
    submitted_at: datetime
    resolved_at: datetime | None = None

    @classmethod
    def from_domain(cls, request: MaintenanceRequest) -> MaintenanceRequestResponse:
        return cls(
            id=request.id.value,
            tenant_id=request.tenant_id.value,
            room_id=request.room_id.value,
            title=request.title,
            description=request.description,
            priority=request.priority,
            status=request.status,
            submitted_at=request.submitted_at,
            resolved_at=request.resolved_at,
        )
