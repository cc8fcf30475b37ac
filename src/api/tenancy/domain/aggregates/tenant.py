"""Tenant aggregate for the tenancy context."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from tenancy.domain.exceptions import ConflictError, ValidationError
from tenancy.domain.value_objects import PaymentStatus, RoomId, TenantId, UserId

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PROFILE_FIELDS = frozenset(
    {
        "name",
        "email",
        "phone",
        "emergency_contact",
        "address",
        "lease_start",
        "lease_end",
        "user_id",
    }
)

REQUIRED_PROFILE_FIELDS = ("name", "email", "lease_start", "lease_end")

SERVICE_OWNED_FIELDS = frozenset(
    {
        "id",
        "room_id",
        "requested_room_id",
        "balance",
        "payment_status",
        "archived",
        "version",
    }
)


def validate_email(email: str) -> str:
    cleaned = (email or "").strip()
    if not EMAIL_PATTERN.match(cleaned):
        raise ValidationError(
            f"Invalid email address: {email!r}", {"field": "email"}
        )
    return cleaned.lower()


def validate_lease(lease_start: date, lease_end: date) -> None:
    if lease_end <= lease_start:
        raise ValidationError(
            "lease_end must be after lease_start",
            {
                "field": "lease_end",
                "lease_start": lease_start.isoformat(),
                "lease_end": lease_end.isoformat(),
            },
        )


def validate_name(name: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Tenant name is required", {"field": "name"})
    return cleaned


@dataclass
class Tenant:
    """Tenant aggregate.

    Business rules:
    - ``room_id`` is the authoritative side of the room link
    - ``balance`` and ``payment_status`` are caches maintained by the
      assignment service and recomputed by reconciliation from the payment
      and charge ledgers
    - A tenant must be unassigned before being archived
    """

    id: TenantId
    name: str
    email: str
    lease_start: date
    lease_end: date
    phone: str | None = None
    emergency_contact: str | None = None
    address: str | None = None
    user_id: UserId | None = None
    room_id: RoomId | None = None
    requested_room_id: RoomId | None = None
    balance: Decimal = Decimal("0.00")
    payment_status: PaymentStatus = PaymentStatus.PAID
    archived: bool = False
    version: int = 0

    @classmethod
    def create(
        cls,
        name: str,
        email: str,
        lease_start: date,
        lease_end: date,
        phone: str | None = None,
        emergency_contact: str | None = None,
        address: str | None = None,
        user_id: UserId | None = None,
    ) -> Tenant:
        """Create an unassigned tenant with a zero balance.

        Raises:
            ValidationError: If name, email or lease dates are invalid
        """
        validate_lease(lease_start, lease_end)
        return cls(
            id=TenantId.generate(),
            name=validate_name(name),
            email=validate_email(email),
            lease_start=lease_start,
            lease_end=lease_end,
            phone=phone,
            emergency_contact=emergency_contact,
            address=address,
            user_id=user_id,
        )

    @property
    def is_assigned(self) -> bool:
        return self.room_id is not None

    def update_profile(self, changes: dict) -> None:
        """Apply validated profile changes.

        Only keys in PROFILE_FIELDS are accepted; the service layer rejects
        service-owned fields before calling this.
        """
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValidationError(
                f"Unknown tenant field(s): {', '.join(sorted(unknown))}",
                {"fields": sorted(unknown)},
            )
        cleared = [
            field
            for field in REQUIRED_PROFILE_FIELDS
            if field in changes and changes[field] is None
        ]
        if cleared:
            raise ValidationError(
                f"Required tenant field(s) cannot be cleared: {', '.join(cleared)}",
                {"fields": cleared},
            )

        lease_start = changes.get("lease_start", self.lease_start)
        lease_end = changes.get("lease_end", self.lease_end)
        validate_lease(lease_start, lease_end)

        if "name" in changes:
            self.name = validate_name(changes["name"])
        if "email" in changes:
            self.email = validate_email(changes["email"])
        for attr in ("phone", "emergency_contact", "address", "user_id"):
            if attr in changes:
                setattr(self, attr, changes[attr])
        self.lease_start = lease_start
        self.lease_end = lease_end

    def link_room(self, room_id: RoomId) -> None:
        """Point the tenant at a room, settling any pending application.

        Raises:
            ConflictError: If archived or already linked to another room
        """
        if self.archived:
            raise ConflictError(
                f"Tenant {self.id} is archived", {"tenant_id": self.id.value}
            )
        if self.room_id is not None and self.room_id != room_id:
            raise ConflictError(
                f"Tenant {self.id} is already assigned to room {self.room_id}; "
                "unassign first",
                {"tenant_id": self.id.value, "room_id": self.room_id.value},
            )
        self.room_id = room_id
        self.requested_room_id = None

    def request_room(self, room_id: RoomId) -> None:
        """Record a room the tenant applied for, pending approval.

        Raises:
            ConflictError: If archived or already assigned to a room
        """
        if self.archived:
            raise ConflictError(
                f"Tenant {self.id} is archived", {"tenant_id": self.id.value}
            )
        if self.room_id is not None:
            raise ConflictError(
                f"Tenant {self.id} is already assigned to room {self.room_id}",
                {"tenant_id": self.id.value, "room_id": self.room_id.value},
            )
        self.requested_room_id = room_id

    def unlink_room(self) -> RoomId | None:
        """Clear the room link and return the previous room, if any."""
        previous = self.room_id
        self.room_id = None
        return previous

    def settle(self, balance: Decimal, payment_status: PaymentStatus) -> bool:
        """Store a recomputed balance and status.

        Returns:
            True if either value changed
        """
        changed = balance != self.balance or payment_status != self.payment_status
        self.balance = balance
        self.payment_status = payment_status
        return changed

    def archive(self) -> None:
        """Archive the tenant at lease termination.

        Raises:
            ConflictError: If the tenant is still assigned to a room
        """
        if self.room_id is not None:
            raise ConflictError(
                f"Tenant {self.id} is still assigned to room {self.room_id}; "
                "unassign before archiving",
                {"tenant_id": self.id.value, "room_id": self.room_id.value},
            )
        self.requested_room_id = None
        self.archived = True
