"""HTTP routes for the room registry."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tenancy.application.services import AssignmentService, RoomService
from tenancy.application.value_objects import CurrentUser, RoomFilter
from tenancy.dependencies.authentication import get_current_user
from tenancy.dependencies.services import get_assignment_service, get_room_service
from tenancy.domain.exceptions import TenancyError
from tenancy.domain.value_objects import RoomId, RoomStatus, RoomType
from tenancy.presentation.errors import invalid_id, to_http_exception
from tenancy.presentation.rooms.models import (
    ChangeRoomTypeRequest,
    CreateRoomRequest,
    RoomResponse,
    UpdateRoomRequest,
)

router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def _parse_room_id(room_id: str) -> RoomId:
    try:
        return RoomId.from_string(room_id)
    except ValueError:
        raise invalid_id("room")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create room",
    responses={
        201: {"description": "Room created"},
        403: {"description": "Caller may not manage rooms"},
        409: {"description": "Room number already exists"},
        422: {"description": "Invalid room data"},
    },
)
async def create_room(
    request: CreateRoomRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[RoomService, Depends(get_room_service)],
) -> RoomResponse:
    """Create a new, empty room.

    Args:
        request: Room details
        current_user: Current authenticated user
        service: Room service

    Returns:
        RoomResponse with zero occupants and ``available`` status

    Raises:
        HTTPException: 409 if the room number is taken
        HTTPException: 422 if the capacity or price is invalid
        HTTPException: 500 for unexpected errors
    """
    try:
        room = await service.create_room(
            current_user,
            number=request.number,
            floor=request.floor,
            room_type=request.room_type,
            price_per_month=request.price_per_month,
            max_occupants=request.max_occupants,
            description=request.description,
            amenities=request.amenities,
        )
        return RoomResponse.from_domain(room)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create room",
        )


@router.get(
    "",
    response_model=list[RoomResponse],
    summary="List rooms",
    description="List rooms, optionally filtered by status, floor, type or vacancy",
)
async def list_rooms(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[RoomService, Depends(get_room_service)],
    room_status: Annotated[RoomStatus | None, Query(alias="status")] = None,
    floor: str | None = None,
    room_type: RoomType | None = None,
    vacancy: bool = False,
) -> list[RoomResponse]:
    """List rooms with occupancy checked against the live tenant count."""
    filters = RoomFilter(
        status=room_status,
        floor=floor,
        room_type=room_type,
        only_with_vacancy=vacancy,
    )
    try:
        rooms = await service.list_rooms(current_user, filters)
        return [RoomResponse.from_domain(room) for room in rooms]

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list rooms",
        )


@router.get("/{room_id}")
async def get_room(
    room_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[RoomService, Depends(get_room_service)],
) -> RoomResponse:
    """Get a room by ID.

    Raises:
        HTTPException: 400 if the room ID is invalid
        HTTPException: 404 if the room does not exist
        HTTPException: 500 for unexpected errors
    """
    room_id_obj = _parse_room_id(room_id)

    try:
        room = await service.get_room(current_user, room_id_obj)
        return RoomResponse.from_domain(room)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get room",
        )


@router.patch("/{room_id}")
async def update_room(
    room_id: str,
    request: UpdateRoomRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[RoomService, Depends(get_room_service)],
) -> RoomResponse:
    """Partially update a room.

    Raises:
        HTTPException: 400 if the ID is invalid or the body sets a
            service-owned field
        HTTPException: 404 if the room does not exist
        HTTPException: 409 if capacity would drop below occupancy
        HTTPException: 500 for unexpected errors
    """
    room_id_obj = _parse_room_id(room_id)

    try:
        room = await service.update_room(current_user, room_id_obj, request.to_patch())
        return RoomResponse.from_domain(room)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update room",
        )


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[RoomService, Depends(get_room_service)],
) -> None:
    """Delete an empty room.

    Raises:
        HTTPException: 404 if the room does not exist
        HTTPException: 409 if tenants are still assigned
    """
    room_id_obj = _parse_room_id(room_id)

    try:
        await service.delete_room(current_user, room_id_obj)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete room",
        )


@router.post("/{room_id}/type")
async def change_room_type(
    room_id: str,
    request: ChangeRoomTypeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> RoomResponse:
    """Switch a room's type; capacity resets to the type default.

    Raises:
        HTTPException: 409 if the new capacity is below current occupancy
    """
    room_id_obj = _parse_room_id(room_id)

    try:
        room = await service.change_room_type(
            current_user, room_id_obj, request.room_type
        )
        return RoomResponse.from_domain(room)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to change room type",
        )
