"""SQLAlchemy ORM models for the rooms and room_amenities tables."""

from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class RoomModel(Base, TimestampMixin):
    """ORM model for the rooms table.

    ``occupant_count`` is a cache of the number of tenants linked to the
    room. ``version`` is the optimistic-concurrency token; every update is
    conditional on it.
    """

    __tablename__ = "rooms"
    __table_args__ = (
        CheckConstraint("max_occupants >= 1", name="ck_rooms_max_occupants"),
        CheckConstraint("price_per_month >= 0", name="ck_rooms_price"),
        CheckConstraint("occupant_count >= 0", name="ck_rooms_occupant_count"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    number: Mapped[str] = mapped_column(
        String(32), nullable=False, unique=True, index=True
    )
    floor: Mapped[str] = mapped_column(String(32), nullable=False)
    room_type: Mapped[str] = mapped_column(String(16), nullable=False)
    max_occupants: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_month: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    occupant_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    under_maintenance: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoomModel(id={self.id}, number={self.number})>"


class RoomAmenityModel(Base):
    """ORM model for the room_amenities table.

    Amenities are owned by their room and deleted with it.
    """

    __tablename__ = "room_amenities"

    room_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<RoomAmenityModel(room_id={self.room_id}, name={self.name})>"
