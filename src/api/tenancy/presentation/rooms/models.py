"""Pydantic models for room API requests and responses."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from tenancy.domain.aggregates import Room
from tenancy.domain.value_objects import RoomStatus, RoomType


class CreateRoomRequest(BaseModel):
    """Request model for creating a room.

    ``max_occupants`` defaults from the room type when omitted.
    """

    number: str = Field(..., description="Room number", min_length=1, max_length=32)
    floor: str = Field(default="", description="Floor label", max_length=32)
    room_type: RoomType = Field(..., description="single, double, triple or quad")
    price_per_month: Decimal = Field(..., description="Monthly rent")
    max_occupants: int | None = Field(
        default=None, description="Capacity override", ge=1
    )
    description: str | None = Field(default=None, description="Free text")
    amenities: list[str] = Field(default_factory=list, description="Amenity names")


class UpdateRoomRequest(BaseModel):
    """Partial update of a room.

    Unknown keys are passed through so that attempts to set service-owned
    fields (occupant_count, status, version) are reported by name.
    """

    model_config = ConfigDict(extra="allow")

    number: str | None = Field(default=None, description="Room number")
    floor: str | None = Field(default=None, description="Floor label")
    room_type: RoomType | None = Field(default=None, description="Room type")
    max_occupants: int | None = Field(default=None, description="Capacity")
    price_per_month: Decimal | None = Field(default=None, description="Monthly rent")
    under_maintenance: bool | None = Field(
        default=None, description="Take the room out of service"
    )
    description: str | None = Field(default=None, description="Free text")
    amenities: list[str] | None = Field(default=None, description="Amenity names")

    def to_patch(self) -> dict:
        """Only the keys the caller actually sent."""
        patch = self.model_dump(exclude_unset=True)
        patch.update(self.model_extra or {})
        return patch


class ChangeRoomTypeRequest(BaseModel):
    """Request model for switching a room's type."""

    room_type: RoomType = Field(..., description="New room type")


class RoomResponse(BaseModel):
    """Response model for a room."""

    id: str = Field(..., description="Room ID (ULID format)")
    number: str = Field(..., description="Room number")
    floor: str = Field(..., description="Floor label")
    room_type: RoomType = Field(..., description="Room type")
    max_occupants: int = Field(..., description="Capacity")
    occupant_count: int = Field(..., description="Tenants currently assigned")
    price_per_month: Decimal = Field(..., description="Monthly rent")
    under_maintenance: bool = Field(..., description="Out of service")
    status: RoomStatus = Field(..., description="Derived occupancy status")
    description: str | None = Field(default=None, description="Free text")
    amenities: list[str] = Field(default_factory=list, description="Amenity names")
    version: int = Field(..., description="Concurrency version")

    @classmethod
    def from_domain(cls, room: Room) -> RoomResponse:
        """Convert domain Room aggregate to API response.

        Args:
            room: Room domain aggregate

        Returns:
            RoomResponse with the room's derived status
        """
        return cls(
            id=room.id.value,
            number=room.number,
            floor=room.floor,
            room_type=room.room_type,
            max_occupants=room.max_occupants,
            occupant_count=room.occupant_count,
            price_per_month=room.price_per_month,
            under_maintenance=room.under_maintenance,
            status=room.status,
            description=room.description,
            amenities=list(room.amenities),
            version=room.version,
        )
