"""Application-layer value objects for the tenancy bounded context.

These represent cross-cutting concerns such as the authentication context
of a request and read-only views produced by services, not core business
entities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from tenancy.domain.aggregates import Payment, Room, Tenant
from tenancy.domain.value_objects import (
    MaintenanceStatus,
    PaymentStatus,
    Role,
    RoomId,
    RoomStatus,
    RoomType,
    TenantId,
    UserId,
)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated principal making the request.

    Extracted from the bearer token: ``user_id`` is the token subject and
    ``role`` comes from the configured role claim.
    """

    user_id: UserId
    username: str
    role: Role


@dataclass(frozen=True)
class RoomFilter:
    """Optional filters for listing rooms. Unset fields match everything."""

    status: RoomStatus | None = None
    floor: str | None = None
    room_type: RoomType | None = None
    only_with_vacancy: bool = False


@dataclass(frozen=True)
class TenantFilter:
    """Optional filters for listing tenants."""

    payment_status: PaymentStatus | None = None
    room_id: RoomId | None = None
    unassigned_only: bool = False
    include_archived: bool = False


@dataclass(frozen=True)
class MaintenanceFilter:
    """Optional filters for listing maintenance requests."""

    status: MaintenanceStatus | None = None
    room_id: RoomId | None = None
    tenant_id: TenantId | None = None


@dataclass(frozen=True)
class AssignmentResult:
    """Outcome of an assign or unassign.

    ``changed`` is False when the request was a no-op (already assigned to
    that room, or already unassigned). ``room`` is None only when the tenant
    had no room to begin with.
    """

    tenant: Tenant
    room: Room | None
    changed: bool = True


@dataclass(frozen=True)
class PaymentReceipt:
    """Outcome of applying a payment.

    ``replayed`` is set when an idempotency key matched an earlier payment
    and nothing new was recorded. ``settled`` is False when the payment was
    recorded but the tenant's cached balance could not be updated; balance
    and status are then unknown (None) until the next read of the tenant
    reconciles them.
    """

    payment: Payment
    balance: Decimal | None
    payment_status: PaymentStatus | None
    replayed: bool = False
    settled: bool = True


@dataclass(frozen=True)
class ReconciliationReport:
    """Summary of a reconciliation sweep."""

    rooms_checked: int = 0
    tenants_checked: int = 0
    rooms_repaired: list[str] = field(default_factory=list)
    tenants_repaired: list[str] = field(default_factory=list)
