"""PostgreSQL implementation of IRoomRepository.

Every write to an existing room is a compare-and-swap on ``version``: the
UPDATE only matches the row if nobody has written it since it was loaded.
Amenities live in their own table and are replaced wholesale on save.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Room
from tenancy.domain.value_objects import RoomId, RoomType
from tenancy.infrastructure.models import RoomAmenityModel, RoomModel
from tenancy.infrastructure.observability import (
    DefaultRoomRepositoryProbe,
    RoomRepositoryProbe,
)
from tenancy.ports.exceptions import DuplicateRoomNumberError, StaleVersionError
from tenancy.ports.repositories import IRoomRepository

ROOM_NUMBER_INDEX = "ix_rooms_number"


class RoomRepository(IRoomRepository):
    """Repository managing Room aggregates in PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: RoomRepositoryProbe | None = None,
    ) -> None:
        """Initialize repository with database session.

        Args:
            session: AsyncSession from FastAPI dependency injection
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultRoomRepositoryProbe()

    async def add(self, room: Room) -> None:
        """Insert a new room and its amenities.

        Raises:
            DuplicateRoomNumberError: If the room number is already taken
        """
        model = RoomModel(
            id=room.id.value,
            number=room.number,
            floor=room.floor,
            room_type=room.room_type.value,
            max_occupants=room.max_occupants,
            price_per_month=room.price_per_month,
            occupant_count=room.occupant_count,
            under_maintenance=room.under_maintenance,
            description=room.description,
            version=room.version,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            self._raise_if_duplicate_number(e, room.number)
            raise
        await self._write_amenities(room)
        self._probe.room_saved(room.id.value, room.version)

    async def save(self, room: Room) -> None:
        """Conditionally update a room on its version.

        Raises:
            StaleVersionError: If the stored version differs from room.version
            DuplicateRoomNumberError: If a renumbering collides
        """
        stmt = (
            update(RoomModel)
            .where(RoomModel.id == room.id.value, RoomModel.version == room.version)
            .values(
                number=room.number,
                floor=room.floor,
                room_type=room.room_type.value,
                max_occupants=room.max_occupants,
                price_per_month=room.price_per_month,
                occupant_count=room.occupant_count,
                under_maintenance=room.under_maintenance,
                description=room.description,
                version=room.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as e:
            self._raise_if_duplicate_number(e, room.number)
            raise

        if result.rowcount != 1:
            self._probe.stale_write_rejected("Room", room.id.value, room.version)
            raise StaleVersionError("Room", room.id.value, room.version)

        await self._session.execute(
            delete(RoomAmenityModel).where(RoomAmenityModel.room_id == room.id.value)
        )
        await self._write_amenities(room)
        room.version += 1
        self._probe.room_saved(room.id.value, room.version)

    async def get_by_id(self, room_id: RoomId) -> Room | None:
        stmt = (
            select(RoomModel)
            .where(RoomModel.id == room_id.value)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        amenities = await self._load_amenities([model.id])
        return self._to_domain(model, amenities.get(model.id, ()))

    async def get_by_number(self, number: str) -> Room | None:
        stmt = (
            select(RoomModel)
            .where(RoomModel.number == number)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None
        amenities = await self._load_amenities([model.id])
        return self._to_domain(model, amenities.get(model.id, ()))

    async def list_all(self) -> list[Room]:
        stmt = (
            select(RoomModel)
            .order_by(RoomModel.number)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()
        amenities = await self._load_amenities([m.id for m in models])
        return [self._to_domain(m, amenities.get(m.id, ())) for m in models]

    async def delete(self, room: Room) -> bool:
        """Delete a room if its version has not moved.

        Returns:
            True if deleted, False if not found

        Raises:
            StaleVersionError: If the room was written since it was loaded
        """
        stmt = (
            delete(RoomModel)
            .where(RoomModel.id == room.id.value, RoomModel.version == room.version)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 1:
            self._probe.room_deleted(room.id.value)
            return True

        exists = await self._session.execute(
            select(RoomModel.id).where(RoomModel.id == room.id.value)
        )
        if exists.scalar_one_or_none() is None:
            return False
        self._probe.stale_write_rejected("Room", room.id.value, room.version)
        raise StaleVersionError("Room", room.id.value, room.version)

    async def _write_amenities(self, room: Room) -> None:
        if not room.amenities:
            return
        await self._session.execute(
            insert(RoomAmenityModel),
            [
                {"room_id": room.id.value, "name": name, "position": position}
                for position, name in enumerate(room.amenities)
            ],
        )

    async def _load_amenities(self, room_ids: list[str]) -> dict[str, tuple[str, ...]]:
        if not room_ids:
            return {}
        stmt = (
            select(RoomAmenityModel.room_id, RoomAmenityModel.name)
            .where(RoomAmenityModel.room_id.in_(room_ids))
            .order_by(RoomAmenityModel.room_id, RoomAmenityModel.position)
        )
        result = await self._session.execute(stmt)
        amenities: dict[str, list[str]] = {}
        for room_id, name in result.all():
            amenities.setdefault(room_id, []).append(name)
        return {room_id: tuple(names) for room_id, names in amenities.items()}

    def _raise_if_duplicate_number(self, error: IntegrityError, number: str) -> None:
        if ROOM_NUMBER_INDEX in str(error):
            self._probe.duplicate_room_number(number)
            raise DuplicateRoomNumberError(
                f"Room number '{number}' already exists",
                {"field": "number", "number": number},
            ) from error

    @staticmethod
    def _to_domain(model: RoomModel, amenities: tuple[str, ...]) -> Room:
        return Room(
            id=RoomId(value=model.id),
            number=model.number,
            floor=model.floor,
            room_type=RoomType(model.room_type),
            max_occupants=model.max_occupants,
            price_per_month=Decimal(model.price_per_month),
            occupant_count=model.occupant_count,
            under_maintenance=model.under_maintenance,
            description=model.description,
            amenities=amenities,
            version=model.version,
        )
