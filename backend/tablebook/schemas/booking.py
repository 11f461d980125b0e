"""Pydantic schemas for bookings."""
from __future__ import annotations

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tablebook.models.booking import BookingStatus
from tablebook.schemas.restaurant import RestaurantContact


class BookingBase(BaseModel):
    """Shared booking fields."""

    restaurant_id: str
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=3, max_length=32)
    date: dt.date
    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    guests: int = Field(gt=0)
    special_requests: str | None = Field(default=None, max_length=1024)


class BookingCreate(BookingBase):
    """Payload for creating bookings."""


class BookingRead(BookingBase):
    """Serialized booking representation."""

    id: uuid.UUID
    customer_email: str
    tables: list[int]
    status: BookingStatus
    confirmation_code: str
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class BookingWithRestaurant(BookingRead):
    """Booking plus the restaurant's contact details."""

    restaurant: RestaurantContact | None = None


class BookingStatusUpdate(BaseModel):
    """Payload for moving a booking through its lifecycle."""

    status: BookingStatus
