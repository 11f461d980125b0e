"""Gift card models."""
from __future__ import annotations

import datetime as dt
import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, Enum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tablebook.db.base import Base
from tablebook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tablebook.models.restaurant import Restaurant


class GiftCardStatus(str, enum.Enum):
    """Lifecycle states for gift cards."""

    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class GiftCard(TimestampMixin, Base):
    """A prepaid balance redeemable at one restaurant."""

    __tablename__ = "gift_cards"
    __table_args__ = (Index("ix_gift_cards_restaurant_status", "restaurant_id", "status"),)

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    code: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    used_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0.00")
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="eur")
    recipient_name: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_name: Mapped[str] = mapped_column(String(255), nullable=False)
    sender_email: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(String(1024))
    status: Mapped[GiftCardStatus] = mapped_column(
        Enum(GiftCardStatus), default=GiftCardStatus.ACTIVE, nullable=False
    )
    expires_on: Mapped[dt.date] = mapped_column(Date, nullable=False)
    payment_intent_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False
    )

    restaurant: Mapped["Restaurant"] = relationship("Restaurant")

    @property
    def remaining_amount(self) -> Decimal:
        return Decimal(self.amount) - Decimal(self.used_amount or 0)
