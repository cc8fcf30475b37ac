"""Unit tests for the /tenancy/rooms routes."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from tenancy.application.services import AssignmentService, RoomService
from tenancy.application.value_objects import RoomFilter
from tenancy.dependencies.services import get_assignment_service, get_room_service
from tenancy.domain.aggregates import Room
from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    ForbiddenFieldError,
    NotFoundError,
)
from tenancy.domain.value_objects import RoomId, RoomStatus, RoomType
from tenancy.ports.exceptions import DuplicateRoomNumberError


@pytest.fixture
def mock_room_service() -> AsyncMock:
    return AsyncMock(spec=RoomService)


@pytest.fixture
def mock_assignment_service() -> AsyncMock:
    return AsyncMock(spec=AssignmentService)


@pytest.fixture
def test_client(make_client, mock_room_service, mock_assignment_service) -> TestClient:
    return make_client(
        {
            get_room_service: mock_room_service,
            get_assignment_service: mock_assignment_service,
        }
    )


def make_room(**overrides) -> Room:
    fields = {
        "number": "101",
        "floor": "1",
        "room_type": RoomType.DOUBLE,
        "price_per_month": "450",
    }
    fields.update(overrides)
    return Room.create(**fields)


class TestCreateRoom:
    """Tests for POST /tenancy/rooms."""

    def test_returns_201_with_room(self, test_client, mock_room_service):
        room = make_room(amenities=["wifi"])
        mock_room_service.create_room.return_value = room

        response = test_client.post(
            "/tenancy/rooms",
            json={
                "number": "101",
                "floor": "1",
                "room_type": "double",
                "price_per_month": "450",
                "amenities": ["wifi"],
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["id"] == room.id.value
        assert body["occupant_count"] == 0
        assert body["status"] == "available"
        assert body["max_occupants"] == 2
        assert body["amenities"] == ["wifi"]

    def test_duplicate_number_is_409(self, test_client, mock_room_service):
        mock_room_service.create_room.side_effect = DuplicateRoomNumberError(
            "Room number '101' already exists", {"field": "number", "number": "101"}
        )

        response = test_client.post(
            "/tenancy/rooms",
            json={"number": "101", "room_type": "single", "price_per_month": "300"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["details"] == {"field": "number", "number": "101"}

    def test_unknown_room_type_is_422(self, test_client, mock_room_service):
        response = test_client.post(
            "/tenancy/rooms",
            json={"number": "101", "room_type": "penthouse", "price_per_month": "1"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_room_service.create_room.assert_not_called()

    def test_forbidden_caller_is_403(self, test_client, mock_room_service):
        mock_room_service.create_room.side_effect = AuthorizationError(
            "Role 'staff' is not permitted to manage rooms"
        )

        response = test_client.post(
            "/tenancy/rooms",
            json={"number": "101", "room_type": "single", "price_per_month": "300"},
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unexpected_error_is_500(self, test_client, mock_room_service):
        mock_room_service.create_room.side_effect = RuntimeError("db down")

        response = test_client.post(
            "/tenancy/rooms",
            json={"number": "101", "room_type": "single", "price_per_month": "300"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Failed to create room"


class TestListRooms:
    """Tests for GET /tenancy/rooms."""

    def test_maps_query_to_filter(self, test_client, mock_room_service):
        mock_room_service.list_rooms.return_value = [make_room()]

        response = test_client.get(
            "/tenancy/rooms",
            params={"status": "available", "floor": "1", "vacancy": "true"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 1
        filters = mock_room_service.list_rooms.call_args[0][1]
        assert filters == RoomFilter(
            status=RoomStatus.AVAILABLE, floor="1", only_with_vacancy=True
        )


class TestRoomById:
    """Tests for GET, PATCH and DELETE /tenancy/rooms/{room_id}."""

    def test_invalid_id_is_400(self, test_client, mock_room_service):
        response = test_client.get("/tenancy/rooms/not-a-ulid")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["detail"] == "Invalid room ID format"
        mock_room_service.get_room.assert_not_called()

    def test_missing_room_is_404(self, test_client, mock_room_service):
        room_id = RoomId.generate()
        mock_room_service.get_room.side_effect = NotFoundError(
            f"Room {room_id} not found"
        )

        response = test_client.get(f"/tenancy/rooms/{room_id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_patch_forwards_service_owned_fields(self, test_client, mock_room_service):
        room_id = RoomId.generate()
        mock_room_service.update_room.side_effect = ForbiddenFieldError(
            ["occupant_count"]
        )

        response = test_client.patch(
            f"/tenancy/rooms/{room_id}", json={"occupant_count": 5}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["details"] == {"fields": ["occupant_count"]}
        patch = mock_room_service.update_room.call_args[0][2]
        assert patch == {"occupant_count": 5}

    def test_patch_sends_only_given_fields(self, test_client, mock_room_service):
        room = make_room()
        mock_room_service.update_room.return_value = room

        response = test_client.patch(
            f"/tenancy/rooms/{room.id}", json={"under_maintenance": True}
        )

        assert response.status_code == status.HTTP_200_OK
        patch = mock_room_service.update_room.call_args[0][2]
        assert patch == {"under_maintenance": True}

    def test_delete_occupied_room_is_409(self, test_client, mock_room_service):
        mock_room_service.delete_room.side_effect = ConflictError("Room is occupied")

        response = test_client.delete(f"/tenancy/rooms/{RoomId.generate()}")

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_delete_returns_204(self, test_client, mock_room_service):
        response = test_client.delete(f"/tenancy/rooms/{RoomId.generate()}")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        mock_room_service.delete_room.assert_awaited_once()


class TestChangeRoomType:
    def test_routes_through_assignment_service(
        self, test_client, mock_assignment_service
    ):
        room = make_room(room_type=RoomType.TRIPLE)
        mock_assignment_service.change_room_type.return_value = room

        response = test_client.post(
            f"/tenancy/rooms/{room.id}/type", json={"room_type": "triple"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["room_type"] == "triple"
        assert mock_assignment_service.change_room_type.call_args[0][2] == (
            RoomType.TRIPLE
        )
