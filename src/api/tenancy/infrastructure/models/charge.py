"""SQLAlchemy ORM model for the charges table."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, TimestampMixin


class ChargeModel(Base, TimestampMixin):
    """ORM model for the charges table.

    Rows are append-only. ``period`` is set for rent accruals and is unique
    per tenant so a month is charged at most once.
    """

    __tablename__ = "charges"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_charges_amount_positive"),
        UniqueConstraint("tenant_id", "period", name="uq_charges_tenant_period"),
        Index("ix_charges_tenant_due_date", "tenant_id", "due_date"),
    )

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    period: Mapped[date | None] = mapped_column(Date, nullable=True)
    posted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"<ChargeModel(id={self.id}, tenant_id={self.tenant_id}, "
            f"amount={self.amount}, due_date={self.due_date})>"
        )
