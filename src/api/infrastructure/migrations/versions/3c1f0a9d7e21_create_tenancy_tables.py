"""create tenancy tables

Revision ID: 3c1f0a9d7e21
Revises:
Create Date: 2026-10-19 09:12:44.518203

Creates the rooms, room_amenities, tenants, payments, charges,
maintenance_requests and room_assignment_logs tables.

Constraint names are relied on by the repositories to translate
integrity errors into domain errors:
- ix_rooms_number (unique room numbers)
- uq_tenants_user_id (one tenant record per login)
- uq_payments_tenant_idempotency_key (idempotent payments)
- uq_charges_tenant_period (rent accrued once per month)
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "3c1f0a9d7e21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all tenancy tables.

    Key constraints:
    - tenants.room_id FK with RESTRICT (rooms are deleted only when empty)
    - payments and charges FK to tenants with RESTRICT (ledgers are never destroyed)
    - room_amenities cascade with their room
    """
    op.create_table(
        "rooms",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("number", sa.String(32), nullable=False),
        sa.Column("floor", sa.String(32), nullable=False),
        sa.Column("room_type", sa.String(16), nullable=False),
        sa.Column("max_occupants", sa.Integer, nullable=False),
        sa.Column("price_per_month", sa.Numeric(12, 2), nullable=False),
        sa.Column(
            "occupant_count", sa.Integer, nullable=False, server_default="0"
        ),
        sa.Column(
            "under_maintenance",
            sa.Boolean,
            nullable=False,
            server_default=sa.false(),
        ),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("max_occupants >= 1", name="ck_rooms_max_occupants"),
        sa.CheckConstraint("price_per_month >= 0", name="ck_rooms_price"),
        sa.CheckConstraint("occupant_count >= 0", name="ck_rooms_occupant_count"),
    )
    op.create_index("ix_rooms_number", "rooms", ["number"], unique=True)

    op.create_table(
        "room_amenities",
        sa.Column(
            "room_id",
            sa.String(26),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("name", sa.String(100), primary_key=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "tenants",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("emergency_contact", sa.String(255), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("user_id", sa.String(255), nullable=True),
        sa.Column(
            "room_id",
            sa.String(26),
            sa.ForeignKey("rooms.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column(
            "requested_room_id",
            sa.String(26),
            sa.ForeignKey("rooms.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("lease_start", sa.Date, nullable=False),
        sa.Column("lease_end", sa.Date, nullable=False),
        sa.Column(
            "balance", sa.Numeric(12, 2), nullable=False, server_default="0.00"
        ),
        sa.Column(
            "payment_status", sa.String(16), nullable=False, server_default="paid"
        ),
        sa.Column("archived", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("version", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("lease_end > lease_start", name="ck_tenants_lease_order"),
        sa.UniqueConstraint("user_id", name="uq_tenants_user_id"),
    )
    op.create_index("ix_tenants_name", "tenants", ["name"])
    op.create_index("ix_tenants_room_id", "tenants", ["room_id"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "tenant_id",
            sa.String(26),
            sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_date", sa.Date, nullable=False),
        sa.Column("method", sa.String(32), nullable=False),
        sa.Column("reference_number", sa.String(100), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("idempotency_key", sa.String(255), nullable=True),
        sa.Column(
            "status", sa.String(16), nullable=False, server_default="recorded"
        ),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        sa.UniqueConstraint(
            "tenant_id",
            "idempotency_key",
            name="uq_payments_tenant_idempotency_key",
        ),
    )
    op.create_index(
        "ix_payments_tenant_date", "payments", ["tenant_id", "payment_date", "id"]
    )

    op.create_table(
        "charges",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "tenant_id",
            sa.String(26),
            sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("description", sa.String(255), nullable=False),
        sa.Column("period", sa.Date, nullable=True),
        sa.Column("posted_at", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_charges_amount_positive"),
        sa.UniqueConstraint("tenant_id", "period", name="uq_charges_tenant_period"),
    )
    op.create_index("ix_charges_tenant_due_date", "charges", ["tenant_id", "due_date"])

    op.create_table(
        "maintenance_requests",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "tenant_id",
            sa.String(26),
            sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "room_id",
            sa.String(26),
            sa.ForeignKey("rooms.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index(
        "ix_maintenance_requests_tenant_id", "maintenance_requests", ["tenant_id"]
    )
    op.create_index(
        "ix_maintenance_requests_room_id", "maintenance_requests", ["room_id"]
    )
    op.create_index(
        "ix_maintenance_requests_status", "maintenance_requests", ["status"]
    )

    op.create_table(
        "room_assignment_logs",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "tenant_id",
            sa.String(26),
            sa.ForeignKey("tenants.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("room_id", sa.String(26), nullable=False),
        sa.Column("action", sa.String(16), nullable=False),
        sa.Column("actor_id", sa.String(255), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_room_assignment_logs_tenant_id", "room_assignment_logs", ["tenant_id"]
    )


def downgrade() -> None:
    """Drop all tenancy tables in dependency order."""
    op.drop_index("ix_room_assignment_logs_tenant_id", table_name="room_assignment_logs")
    op.drop_table("room_assignment_logs")
    op.drop_index("ix_maintenance_requests_status", table_name="maintenance_requests")
    op.drop_index("ix_maintenance_requests_room_id", table_name="maintenance_requests")
    op.drop_index(
        "ix_maintenance_requests_tenant_id", table_name="maintenance_requests"
    )
    op.drop_table("maintenance_requests")
    op.drop_index("ix_charges_tenant_due_date", table_name="charges")
    op.drop_table("charges")
    op.drop_index("ix_payments_tenant_date", table_name="payments")
    op.drop_table("payments")
    op.drop_index("ix_tenants_room_id", table_name="tenants")
    op.drop_index("ix_tenants_name", table_name="tenants")
    op.drop_table("tenants")
    op.drop_table("room_amenities")
    op.drop_index("ix_rooms_number", table_name="rooms")
    op.drop_table("rooms")
