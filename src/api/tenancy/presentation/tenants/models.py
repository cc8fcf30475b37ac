"""Pydantic models for tenant API requests and responses."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tenancy.application.value_objects import AssignmentResult
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import PaymentStatus
from tenancy.presentation.rooms.models import RoomResponse


class CreateTenantRequest(BaseModel):
    """Request model for registering a tenant.

    Tenant-role callers register themselves: ``user_id`` is taken from the
    token, ``opening_charge`` is reserved for administrators and ``room_id``
    becomes an application awaiting approval.
    """

    name: str = Field(..., description="Full name", min_length=1, max_length=255)
    email: str = Field(..., description="Email address", max_length=255)
    lease_start: date = Field(..., description="First day of the lease")
    lease_end: date = Field(..., description="Last day of the lease")
    phone: str | None = Field(default=None, description="Phone number")
    emergency_contact: str | None = Field(
        default=None, description="Emergency contact"
    )
    address: str | None = Field(default=None, description="Postal address")
    user_id: str | None = Field(
        default=None, description="Identity-provider user linked to the tenant"
    )
    room_id: str | None = Field(
        default=None,
        description="Room to assign at once, or to apply for as a tenant",
    )
    opening_charge: Decimal | None = Field(
        default=None, description="Deposit or first rent, due on lease start"
    )


class UpdateTenantRequest(BaseModel):
    """Partial update of a tenant profile.

    Unknown keys are passed through so that attempts to set room_id,
    balance or payment_status are reported by name.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, description="Full name")
    email: str | None = Field(default=None, description="Email address")
    phone: str | None = Field(default=None, description="Phone number")
    emergency_contact: str | None = Field(
        default=None, description="Emergency contact"
    )
    address: str | None = Field(default=None, description="Postal address")
    lease_start: date | None = Field(default=None, description="Lease start")
    lease_end: date | None = Field(default=None, description="Lease end")
    user_id: str | None = Field(default=None, description="Linked user")

    def to_patch(self) -> dict:
        """Only the keys the caller actually sent."""
        patch = self.model_dump(exclude_unset=True)
        patch.update(self.model_extra or {})
        return patch


class AssignRoomRequest(BaseModel):
    """Request model for assigning a tenant to a room."""

    room_id: str = Field(..., description="Room ID (ULID format)")
    notes: str | None = Field(default=None, description="Recorded in the audit log")


class UnassignRoomRequest(BaseModel):
    """Optional body for unassigning a tenant or approving an application."""

    notes: str | None = Field(default=None, description="Recorded in the audit log")


class TenantResponse(BaseModel):
    """Response model for a tenant."""

    id: str = Field(..., description="Tenant ID (ULID format)")
    name: str = Field(..., description="Full name")
    email: str = Field(..., description="Email address")
    phone: str | None = Field(default=None, description="Phone number")
    emergency_contact: str | None = Field(
        default=None, description="Emergency contact"
    )
    address: str | None = Field(default=None, description="Postal address")
    user_id: str | None = Field(default=None, description="Linked user")
    room_id: str | None = Field(default=None, description="Assigned room")
    requested_room_id: str | None = Field(
        default=None, description="Room applied for, awaiting approval"
    )
    lease_start: date = Field(..., description="Lease start")
    lease_end: date = Field(..., description="Lease end")
    balance: Decimal = Field(..., description="Amount owed; negative is credit")
    payment_status: PaymentStatus = Field(..., description="paid, pending or overdue")
    archived: bool = Field(..., description="Lease terminated")
    version: int = Field(..., description="Concurrency version")

    @classmethod
    def from_domain(cls, tenant: Tenant) -> TenantResponse:
        """Convert domain Tenant aggregate to API response."""
        return cls(
            id=tenant.id.value,
            name=tenant.name,
            email=tenant.email,
            phone=tenant.phone,
            emergency_contact=tenant.emergency_contact,
            address=tenant.address,
            user_id=tenant.user_id.value if tenant.user_id else None,
            room_id=tenant.room_id.value if tenant.room_id else None,
            requested_room_id=(
                tenant.requested_room_id.value if tenant.requested_room_id else None
            ),
            lease_start=tenant.lease_start,
            lease_end=tenant.lease_end,
            balance=tenant.balance,
            payment_status=tenant.payment_status,
            archived=tenant.archived,
            version=tenant.version,
        )


class AssignmentResponse(BaseModel):
    """Response model for assign and unassign.

    ``changed`` is false when the call was a no-op.
    """

    tenant: TenantResponse
    room: RoomResponse | None = None
    changed: bool = Field(..., description="Whether anything was written")

    @classmethod
    def from_result(cls, result: AssignmentResult) -> AssignmentResponse:
        return cls(
            tenant=TenantResponse.from_domain(result.tenant),
            room=RoomResponse.from_domain(result.room) if result.room else None,
            changed=result.changed,
        )
