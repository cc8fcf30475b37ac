"""Repository protocols (ports) for the tenancy bounded context.

The services depend only on these abstractions: get, list, add and a
compare-and-swap ``save``. Implementations exist for PostgreSQL and for
process memory.
"""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncContextManager, Protocol, runtime_checkable

from tenancy.domain.aggregates import (
    Charge,
    MaintenanceRequest,
    Payment,
    Room,
    RoomAssignmentLog,
    Tenant,
)
from tenancy.domain.value_objects import (
    MaintenanceRequestId,
    MaintenanceStatus,
    RoomId,
    TenantId,
    UserId,
)


@runtime_checkable
class ITransactionScope(Protocol):
    """A unit of work boundary.

    ``AsyncSession`` satisfies this protocol directly. Everything written
    inside one ``begin()`` block commits or rolls back together.
    """

    def begin(self) -> AsyncContextManager: ...


@runtime_checkable
class IRoomRepository(Protocol):
    """Repository for Room aggregate persistence."""

    async def add(self, room: Room) -> None:
        """Insert a new room.

        Raises:
            DuplicateRoomNumberError: If the room number is already taken
        """
        ...

    async def save(self, room: Room) -> None:
        """Write an existing room if its version has not moved.

        On success ``room.version`` is incremented to match storage.

        Raises:
            StaleVersionError: If the stored version differs from room.version
            DuplicateRoomNumberError: If a renumbering collides
        """
        ...

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        """Retrieve a room by its ID, or None if not found."""
        ...

    async def get_by_number(self, number: str) -> Room | None:
        """Retrieve a room by its human-facing number, or None."""
        ...

    async def list_all(self) -> list[Room]:
        """List every room ordered by number."""
        ...

    async def delete(self, room: Room) -> bool:
        """Delete a room if its version has not moved.

        Returns:
            True if deleted, False if not found

        Raises:
            StaleVersionError: If the room was written since it was loaded
        """
        ...


@runtime_checkable
class ITenantRepository(Protocol):
    """Repository for Tenant aggregate persistence."""

    async def add(self, tenant: Tenant) -> None:
        """Insert a new tenant."""
        ...

    async def save(self, tenant: Tenant) -> None:
        """Write an existing tenant if its version has not moved.

        On success ``tenant.version`` is incremented to match storage.

        Raises:
            StaleVersionError: If the stored version differs
        """
        ...

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        """Retrieve a tenant by its ID, or None if not found."""
        ...

    async def get_by_user_id(self, user_id: UserId) -> Tenant | None:
        """Retrieve the tenant record linked to an identity-provider user."""
        ...

    async def list_all(self) -> list[Tenant]:
        """List every tenant, archived included, ordered by name."""
        ...

    async def count_by_room(self, room_id: RoomId) -> int:
        """Count tenants whose room link points at the given room.

        This live count is the source of truth for room occupancy.
        """
        ...


@runtime_checkable
class IPaymentRepository(Protocol):
    """Append-only repository for payments."""

    async def add(self, payment: Payment) -> None:
        """Insert a payment.

        Raises:
            DuplicateIdempotencyKeyError: If the tenant already has a
                payment with the same idempotency key
        """
        ...

    async def get_by_idempotency_key(
        self, tenant_id: TenantId, key: str
    ) -> Payment | None:
        """Find the payment previously recorded under a key."""
        ...

    async def list_page(
        self,
        tenant_id: TenantId,
        limit: int,
        after: Payment | None = None,
    ) -> list[Payment]:
        """Fetch one page of a tenant's payments, newest first.

        Ordering is ``payment_date`` descending with the payment id as a
        tie-breaker. ``after`` is the last payment of the previous page.
        """
        ...

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        """Sum of every payment recorded for a tenant."""
        ...


@runtime_checkable
class IChargeRepository(Protocol):
    """Append-only repository for charges."""

    async def add(self, charge: Charge) -> None:
        """Insert a charge.

        Raises:
            DuplicateChargePeriodError: If rent for the period was already
                accrued for the tenant
        """
        ...

    async def list_by_tenant(self, tenant_id: TenantId) -> list[Charge]:
        """All charges for a tenant, oldest due date first."""
        ...

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        """Sum of every charge posted against a tenant."""
        ...


@runtime_checkable
class IMaintenanceRequestRepository(Protocol):
    """Repository for maintenance requests."""

    async def add(self, request: MaintenanceRequest) -> None: ...

    async def save(self, request: MaintenanceRequest) -> None: ...

    async def get_by_id(
        self, request_id: MaintenanceRequestId
    ) -> MaintenanceRequest | None: ...

    async def list_matching(
        self,
        status: MaintenanceStatus | None = None,
        room_id: RoomId | None = None,
        tenant_id: TenantId | None = None,
    ) -> list[MaintenanceRequest]:
        """List requests matching every given filter, newest first."""
        ...


@runtime_checkable
class IAssignmentLogRepository(Protocol):
    """Append-only audit log of room assignment changes."""

    async def add(self, entry: RoomAssignmentLog) -> None: ...

    async def list_by_tenant(self, tenant_id: TenantId) -> list[RoomAssignmentLog]:
        """Entries for a tenant in the order they occurred."""
        ...
