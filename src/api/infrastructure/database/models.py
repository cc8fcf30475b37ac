"""Declarative base for the ledger's ORM models.

Money columns map ``Decimal`` to ``NUMERIC(12, 2)`` unless a model says
otherwise. Row timestamps are timezone-aware UTC and set on the Python side.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Numeric
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for every table in the ledger schema."""

    type_annotation_map: dict[type, Any] = {
        Decimal: Numeric(12, 2),
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """``created_at`` set on insert, ``updated_at`` refreshed on every update."""

    created_at: Mapped[datetime] = mapped_column(
        insert_default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        insert_default=utc_now, onupdate=utc_now, nullable=False
    )
