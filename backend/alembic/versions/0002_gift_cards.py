"""Gift cards.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-17
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

_GIFT_CARD_STATUS = sa.Enum("ACTIVE", "USED", "EXPIRED", name="giftcardstatus")


def upgrade() -> None:
    op.create_table(
        "gift_cards",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "restaurant_id",
            sa.String(length=64),
            sa.ForeignKey("restaurants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("code", sa.String(length=32), nullable=False, unique=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("used_amount", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="eur"),
        sa.Column("recipient_name", sa.String(length=255), nullable=False),
        sa.Column("recipient_email", sa.String(length=255), nullable=False),
        sa.Column("sender_name", sa.String(length=255), nullable=False),
        sa.Column("sender_email", sa.String(length=255), nullable=False),
        sa.Column("message", sa.String(length=1024)),
        sa.Column("status", _GIFT_CARD_STATUS, nullable=False),
        sa.Column("expires_on", sa.Date(), nullable=False),
        sa.Column("payment_intent_id", sa.String(length=255), nullable=False, unique=True),
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
    )
    op.create_index(
        "ix_gift_cards_restaurant_status", "gift_cards", ["restaurant_id", "status"]
    )


def downgrade() -> None:
    op.drop_index("ix_gift_cards_restaurant_status", table_name="gift_cards")
    op.drop_table("gift_cards")
    _GIFT_CARD_STATUS.drop(op.get_bind(), checkfirst=True)
