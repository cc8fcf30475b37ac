"""Room application service for the tenancy bounded context.

Handles the room registry: create, read, list, update and delete. Reads
are self-healing: every room returned has had its cached occupant count
checked against the live tenant count.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from tenancy.application.access_policy import Action, require
from tenancy.application.observability import (
    DefaultRoomServiceProbe,
    RoomServiceProbe,
)
from tenancy.application.services.reconciliation import Reconciler
from tenancy.application.services.unit_of_work import UnitOfWork
from tenancy.application.value_objects import CurrentUser, RoomFilter
from tenancy.domain.aggregates import Room
from tenancy.domain.aggregates.room import (
    derive_room_status,
    normalize_amenities,
    validate_price,
    validate_room_number,
)
from tenancy.domain.exceptions import (
    ForbiddenFieldError,
    NotFoundError,
    ValidationError,
)
from tenancy.domain.value_objects import RoomId, RoomStatus, RoomType
from tenancy.ports.exceptions import DuplicateRoomNumberError
from tenancy.ports.repositories import IRoomRepository

ROOM_PATCH_FIELDS = frozenset(
    {
        "number",
        "floor",
        "room_type",
        "max_occupants",
        "price_per_month",
        "under_maintenance",
        "description",
        "amenities",
    }
)

ROOM_SERVICE_OWNED_FIELDS = frozenset({"id", "occupant_count", "status", "version"})


class RoomService:
    """Application service for room management."""

    def __init__(
        self,
        room_repository: IRoomRepository,
        reconciler: Reconciler,
        unit_of_work: UnitOfWork,
        probe: RoomServiceProbe | None = None,
    ):
        """Initialize RoomService with dependencies.

        Args:
            room_repository: Repository for room persistence
            reconciler: Repairs drifted occupant counts on read
            unit_of_work: Transaction boundary with conflict retries
            probe: Optional domain probe for observability
        """
        self._rooms = room_repository
        self._reconciler = reconciler
        self._uow = unit_of_work
        self._probe = probe or DefaultRoomServiceProbe()

    @staticmethod
    def get_room_status(room: Room) -> RoomStatus:
        """Derive a room's status: maintenance, then full, then occupancy."""
        return derive_room_status(
            room.occupant_count, room.max_occupants, room.under_maintenance
        )

    async def create_room(
        self,
        actor: CurrentUser,
        number: str,
        floor: str,
        room_type: RoomType,
        price_per_month: Decimal | int | str,
        max_occupants: int | None = None,
        description: str | None = None,
        amenities: list[str] | tuple[str, ...] = (),
    ) -> Room:
        """Create a new, empty room.

        Raises:
            AuthorizationError: If the caller may not manage rooms
            ValidationError: If any field is invalid
            DuplicateRoomNumberError: If the number is already taken
        """
        require(actor, Action.MANAGE_ROOMS)
        room = Room.create(
            number=number,
            floor=floor,
            room_type=room_type,
            price_per_month=price_per_month,
            max_occupants=max_occupants,
            description=description,
            amenities=amenities,
        )

        try:
            async with self._uow.begin():
                existing = await self._rooms.get_by_number(room.number)
                if existing is not None:
                    raise DuplicateRoomNumberError(
                        f"Room number '{room.number}' already exists",
                        {"field": "number", "number": room.number},
                    )
                await self._rooms.add(room)
        except DuplicateRoomNumberError:
            self._probe.duplicate_room_number(number=room.number)
            raise

        self._probe.room_created(room_id=room.id.value, number=room.number)
        return room

    async def update_room(
        self, actor: CurrentUser, room_id: RoomId, patch: dict[str, Any]
    ) -> Room:
        """Apply a partial update to a room.

        Occupancy and status are maintained by the service and cannot be
        patched. Capacity cannot drop below the live occupant count.

        Raises:
            AuthorizationError: If the caller may not manage rooms
            ForbiddenFieldError: If the patch sets a service-owned field
            ValidationError: If a field is unknown or invalid
            NotFoundError: If the room does not exist
            ConflictError: If capacity would drop below occupancy, the type's
                default capacity is too small, or retries ran out
            DuplicateRoomNumberError: If the new number is taken
        """
        require(actor, Action.MANAGE_ROOMS)

        forbidden = sorted(set(patch) & ROOM_SERVICE_OWNED_FIELDS)
        if forbidden:
            self._probe.forbidden_fields_rejected(
                room_id=room_id.value, fields=forbidden
            )
            raise ForbiddenFieldError(forbidden)
        unknown = sorted(set(patch) - ROOM_PATCH_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown room field(s): {', '.join(unknown)}", {"fields": unknown}
            )
        changes = self._validate_patch(patch)

        async def work() -> Room:
            room = await self._load(room_id)
            if "number" in changes and changes["number"] != room.number:
                existing = await self._rooms.get_by_number(changes["number"])
                if existing is not None and existing.id != room.id:
                    raise DuplicateRoomNumberError(
                        f"Room number '{changes['number']}' already exists",
                        {"field": "number", "number": changes["number"]},
                    )
            await self._reconciler.refresh_room(room)
            self._apply_patch(room, changes)
            await self._rooms.save(room)
            return room

        try:
            room = await self._uow.run("update_room", work)
        except DuplicateRoomNumberError:
            self._probe.duplicate_room_number(number=changes["number"])
            raise

        self._probe.room_updated(room_id=room.id.value, fields=sorted(changes))
        return room

    async def delete_room(self, actor: CurrentUser, room_id: RoomId) -> None:
        """Delete an empty room.

        Raises:
            AuthorizationError: If the caller may not manage rooms
            NotFoundError: If the room does not exist
            ConflictError: If any tenant is still linked to the room
        """
        require(actor, Action.MANAGE_ROOMS)

        async def work() -> None:
            room = await self._load(room_id)
            await self._reconciler.refresh_room(room)
            room.ensure_empty()
            await self._rooms.delete(room)

        await self._uow.run("delete_room", work)

        self._probe.room_deleted(room_id=room_id.value)

    async def get_room(self, actor: CurrentUser, room_id: RoomId) -> Room:
        """Retrieve a room, repairing its occupant count if it drifted.

        Raises:
            AuthorizationError: If the caller may not read rooms
            NotFoundError: If the room does not exist
        """
        require(actor, Action.READ_ROOMS)
        async with self._uow.begin():
            room = await self._load(room_id)
            await self._reconciler.reconcile_room(room)
        return room

    async def list_rooms(
        self, actor: CurrentUser, filters: RoomFilter | None = None
    ) -> list[Room]:
        """List rooms matching the filters, each reconciled.

        Filtering happens after reconciliation so status and vacancy filters
        see corrected counts.
        """
        require(actor, Action.READ_ROOMS)
        filters = filters or RoomFilter()

        async with self._uow.begin():
            rooms = await self._rooms.list_all()
            for room in rooms:
                await self._reconciler.reconcile_room(room)

        matching = [room for room in rooms if _matches(room, filters)]
        self._probe.rooms_listed(count=len(matching))
        return matching

    async def _load(self, room_id: RoomId) -> Room:
        room = await self._rooms.get_by_id(room_id)
        if room is None:
            self._probe.room_not_found(room_id=room_id.value)
            raise NotFoundError(
                f"Room {room_id} not found", {"room_id": room_id.value}
            )
        return room

    @staticmethod
    def _validate_patch(patch: dict[str, Any]) -> dict[str, Any]:
        """Normalize patch values before anything is loaded or written."""
        changes = dict(patch)
        if "number" in changes:
            changes["number"] = validate_room_number(changes["number"])
        if "floor" in changes:
            changes["floor"] = (changes["floor"] or "").strip()
        if "price_per_month" in changes:
            changes["price_per_month"] = validate_price(changes["price_per_month"])
        if "room_type" in changes:
            try:
                changes["room_type"] = RoomType(changes["room_type"])
            except ValueError as e:
                raise ValidationError(
                    f"Unknown room type: {changes['room_type']!r}",
                    {"field": "room_type"},
                ) from e
        if "max_occupants" in changes and (
            not isinstance(changes["max_occupants"], int)
            or changes["max_occupants"] < 1
        ):
            raise ValidationError(
                "max_occupants must be at least 1",
                {"field": "max_occupants", "value": changes["max_occupants"]},
            )
        if "amenities" in changes:
            changes["amenities"] = normalize_amenities(changes["amenities"] or ())
        if "under_maintenance" in changes:
            changes["under_maintenance"] = bool(changes["under_maintenance"])
        return changes

    @staticmethod
    def _apply_patch(room: Room, changes: dict[str, Any]) -> None:
        # An explicit capacity wins over the new type's default.
        if "room_type" in changes:
            if "max_occupants" in changes:
                room.room_type = changes["room_type"]
            else:
                room.change_type(changes["room_type"])
        if "max_occupants" in changes:
            room.resize(changes["max_occupants"])
        for attr in (
            "number",
            "floor",
            "price_per_month",
            "under_maintenance",
            "description",
            "amenities",
        ):
            if attr in changes:
                setattr(room, attr, changes[attr])


def _matches(room: Room, filters: RoomFilter) -> bool:
    if filters.status is not None and room.status != filters.status:
        return False
    if filters.floor is not None and room.floor != filters.floor:
        return False
    if filters.room_type is not None and room.room_type != filters.room_type:
        return False
    if filters.only_with_vacancy and not room.has_vacancy:
        return False
    return True
