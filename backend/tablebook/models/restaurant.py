"""Restaurant and its booking configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tablebook.db.base import Base
from tablebook.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from tablebook.models.booking import Booking


class Restaurant(TimestampMixin, Base):
    """A bookable restaurant.

    ``booking_config`` holds the serialized :class:`~tablebook.schemas.booking_config.BookingConfig`
    snapshot; read it through ``restaurant_service.load_booking_config``.
    """

    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")
    contact_phone: Mapped[str | None] = mapped_column(String(32))
    contact_email: Mapped[str | None] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    booking_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    bookings: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="restaurant"
    )
