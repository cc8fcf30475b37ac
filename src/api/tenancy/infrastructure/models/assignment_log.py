"""SQLAlchemy ORM model for the room_assignment_logs table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base


class RoomAssignmentLogModel(Base):
    """ORM model for the room_assignment_logs table.

    Append-only audit trail. ``room_id`` is not a foreign key so entries
    outlive the rooms they mention.
    """

    __tablename__ = "room_assignment_logs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[str] = mapped_column(String(26), nullable=False)
    action: Mapped[str] = mapped_column(String(16), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<RoomAssignmentLogModel(id={self.id}, tenant_id={self.tenant_id}, "
            f"action={self.action})>"
        )
