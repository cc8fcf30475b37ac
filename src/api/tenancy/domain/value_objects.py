"""Value objects for the tenancy domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum

from ulid import ULID

CENT = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    """Normalize an amount to a two-place Decimal.

    Floats are rejected: amounts must arrive as Decimal, int or str so that
    no binary rounding error enters the ledger.

    Raises:
        ValueError: If the value is a float or not a number
    """
    if isinstance(value, float):
        raise ValueError("Monetary amounts must not be floats")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid monetary amount: {value!r}") from e
    if not amount.is_finite():
        raise ValueError(f"Invalid monetary amount: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _validate_ulid(value: str, kind: str) -> str:
    try:
        ULID.from_str(value)
    except ValueError as e:
        raise ValueError(f"Invalid {kind}: {value}") from e
    return value


@dataclass(frozen=True)
class RoomId:
    """Identifier for a Room aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> RoomId:
        """Generate a new RoomId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> RoomId:
        """Create RoomId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        return cls(value=_validate_ulid(value, "RoomId"))


@dataclass(frozen=True)
class TenantId:
    """Identifier for a Tenant aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> TenantId:
        """Generate a new TenantId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> TenantId:
        """Create TenantId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        return cls(value=_validate_ulid(value, "TenantId"))


@dataclass(frozen=True)
class PaymentId:
    """Identifier for a Payment record."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> PaymentId:
        """Generate a new PaymentId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> PaymentId:
        """Create PaymentId from string value."""
        return cls(value=_validate_ulid(value, "PaymentId"))


@dataclass(frozen=True)
class ChargeId:
    """Identifier for a Charge record."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> ChargeId:
        """Generate a new ChargeId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> ChargeId:
        """Create ChargeId from string value."""
        return cls(value=_validate_ulid(value, "ChargeId"))


@dataclass(frozen=True)
class MaintenanceRequestId:
    """Identifier for a MaintenanceRequest aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> MaintenanceRequestId:
        """Generate a new MaintenanceRequestId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> MaintenanceRequestId:
        """Create MaintenanceRequestId from string value."""
        return cls(value=_validate_ulid(value, "MaintenanceRequestId"))


@dataclass(frozen=True)
class AssignmentLogId:
    """Identifier for a room assignment log entry."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> AssignmentLogId:
        """Generate a new AssignmentLogId using ULID."""
        return cls(value=str(ULID()))


@dataclass(frozen=True)
class UserId:
    """Identifier of an identity-provider user.

    User IDs come from the external SSO provider (the token subject), so
    they are opaque strings rather than ULIDs.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from a non-empty string.

        Raises:
            ValueError: If value is empty
        """
        if not value or not value.strip():
            raise ValueError("UserId must not be empty")
        return cls(value=value)


class RoomType(StrEnum):
    """Room types offered by the boarding house."""

    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    QUAD = "quad"

    @property
    def default_max_occupants(self) -> int:
        """Occupancy a room of this type holds unless configured otherwise."""
        return _DEFAULT_OCCUPANTS[self]


_DEFAULT_OCCUPANTS = {
    RoomType.SINGLE: 1,
    RoomType.DOUBLE: 2,
    RoomType.TRIPLE: 3,
    RoomType.QUAD: 4,
}


class RoomStatus(StrEnum):
    """Derived occupancy status of a room."""

    AVAILABLE = "available"
    PARTIALLY_OCCUPIED = "partially-occupied"
    FULL = "full"
    MAINTENANCE = "maintenance"


class PaymentStatus(StrEnum):
    """Derived payment standing of a tenant."""

    PAID = "paid"
    PENDING = "pending"
    OVERDUE = "overdue"


class PaymentMethod(StrEnum):
    """How a payment was made."""

    CASH = "cash"
    BANK_TRANSFER = "bank-transfer"
    CREDIT_CARD = "credit-card"
    OTHER = "other"


class PaymentRecordStatus(StrEnum):
    """Status of a payment row. Payments are append-only."""

    RECORDED = "recorded"


class MaintenancePriority(StrEnum):
    """Urgency of a maintenance request."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EMERGENCY = "emergency"


class MaintenanceStatus(StrEnum):
    """Lifecycle of a maintenance request."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        """Completed and cancelled requests accept no further transitions."""
        return self in (MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED)


class AssignmentAction(StrEnum):
    """Kind of room assignment change recorded in the assignment log."""

    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"


class Role(StrEnum):
    """Role claim carried by an authenticated principal."""

    ADMIN = "admin"
    STAFF = "staff"
    TENANT = "tenant"
    SCHOOL = "school"
    PARENT = "parent"
