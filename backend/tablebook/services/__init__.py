"""Service layer exports."""
from tablebook.services import (
    occupancy_service,
    restaurant_service,
    availability_service,
    booking_service,
    gift_card_service,
    notification_service,
)

__all__ = [
    "availability_service",
    "booking_service",
    "gift_card_service",
    "notification_service",
    "occupancy_service",
    "restaurant_service",
]
