"""Restaurants, bookings and table claims.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_BOOKING_STATUS = sa.Enum(
    "PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", name="bookingstatus"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "restaurants",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("timezone", sa.String(length=64), nullable=False),
        sa.Column("contact_phone", sa.String(length=32)),
        sa.Column("contact_email", sa.String(length=255)),
        sa.Column("address", sa.String(length=255)),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("booking_config", sa.JSON(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "restaurant_id",
            sa.String(length=64),
            sa.ForeignKey("restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_email", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=32), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("guests", sa.Integer(), nullable=False),
        sa.Column("tables", sa.JSON(), nullable=False),
        sa.Column("status", _BOOKING_STATUS, nullable=False),
        sa.Column("special_requests", sa.String(length=1024)),
        sa.Column("confirmation_code", sa.String(length=8), nullable=False, unique=True),
        *_timestamps(),
    )
    op.create_index("ix_bookings_restaurant_date", "bookings", ["restaurant_id", "date"])
    op.create_index("ix_bookings_customer_email", "bookings", ["customer_email"])

    op.create_table(
        "booking_table_claims",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("bookings.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "restaurant_id",
            sa.String(length=64),
            sa.ForeignKey("restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=5), nullable=False),
        sa.Column("table_number", sa.Integer(), nullable=False),
        sa.UniqueConstraint(
            "restaurant_id",
            "date",
            "time",
            "table_number",
            name="uq_booking_table_claims_slot_table",
        ),
    )


def downgrade() -> None:
    op.drop_table("booking_table_claims")
    op.drop_index("ix_bookings_customer_email", table_name="bookings")
    op.drop_index("ix_bookings_restaurant_date", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("restaurants")
    _BOOKING_STATUS.drop(op.get_bind(), checkfirst=True)
