"""Tests for RoomService."""

from datetime import date
from unittest.mock import create_autospec

import pytest

from tenancy.application.observability import RoomServiceProbe
from tenancy.application.services import RoomService
from tenancy.application.value_objects import RoomFilter
from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ForbiddenFieldError,
    NotFoundError,
    ValidationError,
)
from tenancy.domain.value_objects import RoomStatus, RoomType
from tenancy.ports.exceptions import DuplicateRoomNumberError


async def create(services, actor, number="101", room_type=RoomType.DOUBLE, **kw):
    return await services.rooms.create_room(
        actor,
        number=number,
        floor=kw.pop("floor", "1"),
        room_type=room_type,
        price_per_month=kw.pop("price_per_month", "450"),
        **kw,
    )


async def tenant_in(services, actor, room, name):
    tenant = await services.tenants.create_tenant(
        actor,
        name=name,
        email=f"{name.lower()}@example.com",
        lease_start=date(2025, 4, 1),
        lease_end=date(2026, 3, 31),
    )
    await services.assignments.assign_tenant_to_room(actor, tenant.id, room.id)
    return tenant


class TestCreateRoom:
    """Tests for RoomService.create_room."""

    @pytest.mark.asyncio
    async def test_creates_empty_available_room(self, services, admin):
        room = await create(services, admin, description="Corner room")

        assert room.occupant_count == 0
        assert room.status == RoomStatus.AVAILABLE
        assert room.max_occupants == 2
        stored = await services.storage.rooms.get_by_number("101")
        assert stored.id == room.id
        assert stored.description == "Corner room"

    @pytest.mark.asyncio
    async def test_duplicate_number_is_both_validation_and_conflict(
        self, services, admin
    ):
        await create(services, admin)

        with pytest.raises(DuplicateRoomNumberError) as exc_info:
            await create(services, admin, room_type=RoomType.SINGLE)

        assert isinstance(exc_info.value, ValidationError)
        assert isinstance(exc_info.value, ConflictError)
        assert len(await services.storage.rooms.list_all()) == 1

    @pytest.mark.asyncio
    async def test_only_admin_may_create(self, services, staff, tenant_user):
        for actor in (staff, tenant_user):
            with pytest.raises(AuthorizationError):
                await create(services, actor)

    @pytest.mark.asyncio
    async def test_records_probe_event(self, storage, services, admin):
        probe = create_autospec(RoomServiceProbe, instance=True)
        service = RoomService(
            room_repository=storage.rooms,
            reconciler=services.reconciler,
            unit_of_work=services.uow,
            probe=probe,
        )

        room = await service.create_room(
            admin,
            number="7",
            floor="G",
            room_type=RoomType.SINGLE,
            price_per_month="300",
        )

        probe.room_created.assert_called_once_with(room_id=room.id.value, number="7")


class TestUpdateRoom:
    """Tests for RoomService.update_room."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["occupant_count", "status", "version"])
    async def test_service_owned_fields_are_forbidden(self, services, admin, field):
        room = await create(services, admin)

        with pytest.raises(ForbiddenFieldError) as exc_info:
            await services.rooms.update_room(admin, room.id, {field: 1})

        assert exc_info.value.fields == (field,)
        stored = await services.storage.rooms.get_by_id(room.id)
        assert stored.version == room.version

    @pytest.mark.asyncio
    async def test_updates_price_and_amenities(self, services, admin):
        room = await create(services, admin)

        updated = await services.rooms.update_room(
            admin, room.id, {"price_per_month": "500", "amenities": ["wifi"]}
        )

        assert str(updated.price_per_month) == "500.00"
        assert updated.amenities == ("wifi",)
        assert updated.version == room.version + 1

    @pytest.mark.asyncio
    async def test_cannot_shrink_capacity_below_occupancy(self, services, admin):
        room = await create(services, admin, room_type=RoomType.QUAD)
        await tenant_in(services, admin, room, "Ada")
        await tenant_in(services, admin, room, "Grace")

        with pytest.raises(ConflictError):
            await services.rooms.update_room(admin, room.id, {"max_occupants": 1})

        updated = await services.rooms.update_room(admin, room.id, {"max_occupants": 2})
        assert updated.status == RoomStatus.FULL

    @pytest.mark.asyncio
    async def test_renumbering_to_taken_number_is_rejected(self, services, admin):
        await create(services, admin, number="101")
        room = await create(services, admin, number="102")

        with pytest.raises(DuplicateRoomNumberError):
            await services.rooms.update_room(admin, room.id, {"number": "101"})

    @pytest.mark.asyncio
    async def test_unknown_field_is_validation_error(self, services, admin):
        room = await create(services, admin)
        with pytest.raises(ValidationError):
            await services.rooms.update_room(admin, room.id, {"colour": "blue"})

    @pytest.mark.asyncio
    async def test_maintenance_flag_wins_over_occupancy(self, services, admin):
        room = await create(services, admin)
        await tenant_in(services, admin, room, "Ada")

        updated = await services.rooms.update_room(
            admin, room.id, {"under_maintenance": True}
        )

        assert updated.status == RoomStatus.MAINTENANCE
        assert updated.occupant_count == 1


class TestDeleteRoom:
    """Tests for RoomService.delete_room."""

    @pytest.mark.asyncio
    async def test_occupied_room_cannot_be_deleted(self, services, admin):
        room = await create(services, admin)
        tenant = await tenant_in(services, admin, room, "Ada")

        with pytest.raises(ConflictError):
            await services.rooms.delete_room(admin, room.id)

        await services.assignments.unassign_tenant(admin, tenant.id)
        await services.rooms.delete_room(admin, room.id)

        with pytest.raises(NotFoundError):
            await services.rooms.get_room(admin, room.id)

    @pytest.mark.asyncio
    async def test_occupancy_is_checked_against_live_count(
        self, store, services, admin
    ):
        room = await create(services, admin)
        await tenant_in(services, admin, room, "Ada")
        store.rooms[room.id.value].occupant_count = 0

        with pytest.raises(ConflictError):
            await services.rooms.delete_room(admin, room.id)


class TestListRooms:
    """Tests for RoomService.list_rooms."""

    @pytest.mark.asyncio
    async def test_filters(self, services, admin, parent_user):
        single = await create(services, admin, number="1", room_type=RoomType.SINGLE)
        await create(services, admin, number="2", floor="2")
        await tenant_in(services, admin, single, "Ada")

        vacant = await services.rooms.list_rooms(
            parent_user, RoomFilter(only_with_vacancy=True)
        )
        full = await services.rooms.list_rooms(
            parent_user, RoomFilter(status=RoomStatus.FULL)
        )
        second_floor = await services.rooms.list_rooms(
            parent_user, RoomFilter(floor="2")
        )

        assert [r.number for r in vacant] == ["2"]
        assert [r.number for r in full] == ["1"]
        assert [r.number for r in second_floor] == ["2"]

    @pytest.mark.asyncio
    async def test_list_repairs_drifted_counts(self, store, services, admin):
        room = await create(services, admin)
        store.rooms[room.id.value].occupant_count = 2

        rooms = await services.rooms.list_rooms(admin)

        assert rooms[0].occupant_count == 0
        assert rooms[0].status == RoomStatus.AVAILABLE
        assert store.rooms[room.id.value].occupant_count == 0
