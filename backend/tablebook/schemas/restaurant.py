"""Pydantic schemas for restaurants."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tablebook.schemas.booking_config import BookingConfig


class RestaurantBase(BaseModel):
    """Shared restaurant fields."""

    name: str = Field(min_length=1, max_length=255)
    timezone: str = Field(default="UTC", max_length=64)
    contact_phone: str | None = Field(default=None, max_length=32)
    contact_email: EmailStr | None = None
    address: str | None = Field(default=None, max_length=255)


class RestaurantCreate(RestaurantBase):
    """Payload for registering a restaurant."""

    id: str = Field(min_length=1, max_length=64, pattern=r"^[a-z0-9][a-z0-9-]*$")
    booking_config: BookingConfig | None = None


class RestaurantRead(RestaurantBase):
    """Serialized restaurant representation."""

    id: str
    is_active: bool
    booking_config: BookingConfig
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RestaurantContact(BaseModel):
    """Contact details shown alongside a booking."""

    name: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
