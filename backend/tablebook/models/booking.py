"""Booking models."""
from __future__ import annotations

import datetime as dt
import enum
import uuid
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tablebook.db.base import Base
from tablebook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tablebook.models.restaurant import Restaurant


class BookingStatus(str, enum.Enum):
    """Lifecycle states for bookings."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(TimestampMixin, Base):
    """A party seated at one or more tables for a single slot."""

    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_restaurant_date", "restaurant_id", "date"),
        Index("ix_bookings_customer_email", "customer_email"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    tables: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[BookingStatus] = mapped_column(
        Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False
    )
    special_requests: Mapped[str | None] = mapped_column(String(1024))
    confirmation_code: Mapped[str] = mapped_column(
        String(8), nullable=False, unique=True
    )

    restaurant: Mapped["Restaurant"] = relationship(
        "Restaurant", back_populates="bookings"
    )
    table_claims: Mapped[list["BookingTableClaim"]] = relationship(
        "BookingTableClaim",
        back_populates="booking",
        cascade="all, delete-orphan",
    )


class BookingTableClaim(Base):
    """One table held by an active booking for one slot.

    The unique constraint rejects a second active claim on the same table for
    the same slot; claims are removed when their booking is cancelled.
    """

    __tablename__ = "booking_table_claims"
    __table_args__ = (
        UniqueConstraint(
            "restaurant_id",
            "date",
            "time",
            "table_number",
            name="uq_booking_table_claims_slot_table",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False
    )
    restaurant_id: Mapped[str] = mapped_column(
        ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(5), nullable=False)
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)

    booking: Mapped[Booking] = relationship("Booking", back_populates="table_claims")
