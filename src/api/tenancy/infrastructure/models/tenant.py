"""SQLAlchemy ORM model for the tenants table."""

from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class TenantModel(Base, TimestampMixin):
    """ORM model for the tenants table.

    ``balance`` and ``payment_status`` cache values derived from the
    charges and payments tables.

    Foreign Key Constraint:
    - room_id references rooms.id with RESTRICT delete
    - Rooms can only be deleted once every tenant has been unassigned
    - requested_room_id references rooms.id with SET NULL delete, so a
      deleted room drops any pending application for it
    """

    __tablename__ = "tenants"
    __table_args__ = (
        CheckConstraint("lease_end > lease_start", name="ck_tenants_lease_order"),
        UniqueConstraint("user_id", name="uq_tenants_user_id"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    emergency_contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    room_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    requested_room_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True
    )
    lease_start: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end: Mapped[date] = mapped_column(Date, nullable=False)
    balance: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    payment_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="paid"
    )
    archived: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<TenantModel(id={self.id}, name={self.name}, room_id={self.room_id})>"
