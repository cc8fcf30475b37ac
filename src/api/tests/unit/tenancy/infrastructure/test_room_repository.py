"""Unit tests for RoomRepository.

Tests verify repository behavior against a mocked async session.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from tenancy.domain.aggregates import Room
from tenancy.domain.value_objects import RoomId, RoomStatus, RoomType
from tenancy.infrastructure.models import RoomModel
from tenancy.infrastructure.room_repository import RoomRepository
from tenancy.ports.exceptions import DuplicateRoomNumberError, StaleVersionError
from tenancy.ports.repositories import IRoomRepository


@pytest.fixture
def mock_session():
    """Create mock async session."""
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_probe():
    """Create mock repository probe."""
    return MagicMock()


@pytest.fixture
def repository(mock_session, mock_probe):
    return RoomRepository(session=mock_session, probe=mock_probe)


def make_room(**overrides) -> Room:
    fields = {
        "number": "101",
        "floor": "1",
        "room_type": RoomType.DOUBLE,
        "price_per_month": "450",
    }
    fields.update(overrides)
    return Room.create(**fields)


def duplicate_number_error() -> IntegrityError:
    return IntegrityError(
        "INSERT INTO rooms ...",
        {},
        Exception('duplicate key value violates unique constraint "ix_rooms_number"'),
    )


def result_with_rowcount(rowcount: int) -> MagicMock:
    result = MagicMock()
    result.rowcount = rowcount
    return result


class TestProtocolCompliance:
    def test_implements_protocol(self, repository):
        assert isinstance(repository, IRoomRepository)


class TestAdd:
    """Tests for add."""

    @pytest.mark.asyncio
    async def test_adds_model_and_amenities(self, repository, mock_session):
        room = make_room(amenities=["wifi", "desk"])

        await repository.add(room)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, RoomModel)
        assert added.id == room.id.value
        assert added.number == "101"
        assert added.room_type == "double"
        rows = mock_session.execute.call_args[0][1]
        assert [(r["name"], r["position"]) for r in rows] == [
            ("wifi", 0),
            ("desk", 1),
        ]

    @pytest.mark.asyncio
    async def test_no_amenity_insert_when_empty(self, repository, mock_session):
        await repository.add(make_room())

        mock_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_number(self, repository, mock_session, mock_probe):
        mock_session.flush.side_effect = duplicate_number_error()

        with pytest.raises(DuplicateRoomNumberError):
            await repository.add(make_room())

        mock_probe.duplicate_room_number.assert_called_once_with("101")

    @pytest.mark.asyncio
    async def test_other_integrity_errors_propagate(self, repository, mock_session):
        mock_session.flush.side_effect = IntegrityError(
            "INSERT", {}, Exception("some other constraint")
        )

        with pytest.raises(IntegrityError):
            await repository.add(make_room())


class TestSave:
    """Tests for the compare-and-swap save."""

    @pytest.mark.asyncio
    async def test_increments_version_on_match(
        self, repository, mock_session, mock_probe
    ):
        room = make_room()
        mock_session.execute.return_value = result_with_rowcount(1)

        await repository.save(room)

        assert room.version == 1
        mock_probe.room_saved.assert_called_once_with(room.id.value, 1)

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected(
        self, repository, mock_session, mock_probe
    ):
        room = make_room()
        mock_session.execute.return_value = result_with_rowcount(0)

        with pytest.raises(StaleVersionError):
            await repository.save(room)

        assert room.version == 0
        assert mock_session.execute.call_count == 1
        mock_probe.stale_write_rejected.assert_called_once_with(
            "Room", room.id.value, 0
        )


class TestReads:
    """Tests for get_by_id and list_all."""

    @pytest.mark.asyncio
    async def test_get_missing_room(self, repository, mock_session):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_session.execute.return_value = result

        assert await repository.get_by_id(RoomId.generate()) is None

    @pytest.mark.asyncio
    async def test_maps_model_and_amenities(self, repository, mock_session):
        room_id = RoomId.generate()
        model = RoomModel(
            id=room_id.value,
            number="7",
            floor="G",
            room_type="single",
            max_occupants=1,
            price_per_month="300.00",
            occupant_count=1,
            under_maintenance=False,
            description=None,
            version=4,
        )
        room_result = MagicMock()
        room_result.scalar_one_or_none.return_value = model
        amenity_result = MagicMock()
        amenity_result.all.return_value = [(room_id.value, "sink")]
        mock_session.execute.side_effect = [room_result, amenity_result]

        room = await repository.get_by_id(room_id)

        assert room.id == room_id
        assert room.room_type == RoomType.SINGLE
        assert room.amenities == ("sink",)
        assert room.version == 4
        assert room.status == RoomStatus.FULL


class TestDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_missing_room_returns_false(self, repository, mock_session):
        missing = MagicMock()
        missing.scalar_one_or_none.return_value = None
        mock_session.execute.side_effect = [result_with_rowcount(0), missing]

        assert await repository.delete(make_room()) is False

    @pytest.mark.asyncio
    async def test_moved_version_is_stale(self, repository, mock_session):
        room = make_room()
        present = MagicMock()
        present.scalar_one_or_none.return_value = room.id.value
        mock_session.execute.side_effect = [result_with_rowcount(0), present]

        with pytest.raises(StaleVersionError):
            await repository.delete(room)
