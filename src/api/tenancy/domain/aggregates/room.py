"""Room aggregate for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from tenancy.domain.exceptions import ConflictError, ValidationError
from tenancy.domain.value_objects import RoomId, RoomStatus, RoomType, to_money


def derive_room_status(
    occupant_count: int, max_occupants: int, under_maintenance: bool
) -> RoomStatus:
    """Compute a room's status from its occupancy and maintenance flag.

    The maintenance flag wins over occupancy. A room is full when its
    occupant count has reached capacity.
    """
    if under_maintenance:
        return RoomStatus.MAINTENANCE
    if occupant_count >= max_occupants:
        return RoomStatus.FULL
    if occupant_count > 0:
        return RoomStatus.PARTIALLY_OCCUPIED
    return RoomStatus.AVAILABLE


def validate_room_number(number: str) -> str:
    """Strip and validate a human-facing room number."""
    cleaned = (number or "").strip()
    if not cleaned:
        raise ValidationError("Room number is required", {"field": "number"})
    if len(cleaned) > 32:
        raise ValidationError(
            "Room number must be at most 32 characters", {"field": "number"}
        )
    return cleaned


def validate_max_occupants(max_occupants: int) -> int:
    if max_occupants < 1:
        raise ValidationError(
            "max_occupants must be at least 1",
            {"field": "max_occupants", "value": max_occupants},
        )
    return max_occupants


def validate_price(price: Decimal | int | str) -> Decimal:
    try:
        amount = to_money(price)
    except ValueError as e:
        raise ValidationError(str(e), {"field": "price_per_month"}) from e
    if amount < 0:
        raise ValidationError(
            "price_per_month must not be negative",
            {"field": "price_per_month", "value": str(amount)},
        )
    return amount


@dataclass
class Room:
    """Room aggregate.

    ``occupant_count`` is a cache of the number of tenants linked to the
    room. The tenant's ``room_id`` is authoritative; the count is kept in
    step by the assignment service and repaired by reconciliation whenever
    it drifts. Callers never set it directly.

    ``version`` is the optimistic-concurrency token. Repositories compare
    it on every write and bump it on success.
    """

    id: RoomId
    number: str
    floor: str
    room_type: RoomType
    max_occupants: int
    price_per_month: Decimal
    occupant_count: int = 0
    under_maintenance: bool = False
    description: str | None = None
    amenities: tuple[str, ...] = field(default_factory=tuple)
    version: int = 0

    @classmethod
    def create(
        cls,
        number: str,
        floor: str,
        room_type: RoomType,
        price_per_month: Decimal | int | str,
        max_occupants: int | None = None,
        description: str | None = None,
        amenities: tuple[str, ...] | list[str] = (),
    ) -> Room:
        """Create a new, empty room.

        ``max_occupants`` defaults from the room type when not given.

        Raises:
            ValidationError: If number, capacity or price are invalid
        """
        capacity = (
            max_occupants
            if max_occupants is not None
            else room_type.default_max_occupants
        )
        return cls(
            id=RoomId.generate(),
            number=validate_room_number(number),
            floor=(floor or "").strip(),
            room_type=room_type,
            max_occupants=validate_max_occupants(capacity),
            price_per_month=validate_price(price_per_month),
            description=description,
            amenities=normalize_amenities(amenities),
        )

    @property
    def status(self) -> RoomStatus:
        """Derived status; never stored."""
        return derive_room_status(
            self.occupant_count, self.max_occupants, self.under_maintenance
        )

    @property
    def has_vacancy(self) -> bool:
        return not self.under_maintenance and self.occupant_count < self.max_occupants

    def sync_occupancy(self, live_count: int) -> bool:
        """Replace the cached occupant count with a live count.

        Returns:
            True if the cached value had drifted and was corrected
        """
        if self.occupant_count == live_count:
            return False
        self.occupant_count = live_count
        return True

    def occupy(self) -> None:
        """Reserve one slot for an incoming tenant.

        Raises:
            ConflictError: If the room is under maintenance or at capacity
        """
        self.ensure_vacancy()
        self.occupant_count += 1

    def ensure_vacancy(self) -> None:
        """Raise ConflictError unless the room can take one more tenant."""
        if self.under_maintenance:
            raise ConflictError(
                f"Room {self.number} is under maintenance",
                {"room_id": self.id.value},
            )
        if self.occupant_count >= self.max_occupants:
            raise ConflictError(
                f"Room {self.number} is at capacity "
                f"({self.occupant_count}/{self.max_occupants})",
                {
                    "room_id": self.id.value,
                    "occupant_count": self.occupant_count,
                    "max_occupants": self.max_occupants,
                },
            )

    def resize(self, max_occupants: int) -> None:
        """Change capacity, refusing to drop below current occupancy.

        Raises:
            ValidationError: If capacity is below 1
            ConflictError: If capacity is below the occupant count
        """
        validate_max_occupants(max_occupants)
        if max_occupants < self.occupant_count:
            raise ConflictError(
                f"Room {self.number} has {self.occupant_count} occupants; "
                f"cannot reduce capacity to {max_occupants}",
                {
                    "room_id": self.id.value,
                    "occupant_count": self.occupant_count,
                    "max_occupants": max_occupants,
                },
            )
        self.max_occupants = max_occupants

    def change_type(self, new_type: RoomType) -> None:
        """Switch room type and reset capacity to the type's default.

        Raises:
            ConflictError: If the new default capacity is below occupancy
        """
        self.resize(new_type.default_max_occupants)
        self.room_type = new_type

    def ensure_empty(self) -> None:
        """Raise ConflictError unless nobody is linked to the room."""
        if self.occupant_count > 0:
            raise ConflictError(
                f"Room {self.number} is occupied by {self.occupant_count} tenant(s)",
                {"room_id": self.id.value, "occupant_count": self.occupant_count},
            )


def normalize_amenities(amenities: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    """Trim, drop blanks and de-duplicate amenity names preserving order."""
    seen: dict[str, None] = {}
    for name in amenities:
        cleaned = name.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)
