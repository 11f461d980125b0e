"""Schema exports."""

from tablebook.schemas.availability import (
    AvailableTable,
    DayAvailability,
    SlotAvailability,
)
from tablebook.schemas.booking import (
    BookingCreate,
    BookingRead,
    BookingStatusUpdate,
    BookingWithRestaurant,
)
from tablebook.schemas.booking_config import (
    BookingConfig,
    RegularSchedule,
    SpecialDate,
    TableSpec,
    TimeSlot,
)
from tablebook.schemas.gift_card import (
    GiftCardConfirm,
    GiftCardPurchaseCreate,
    GiftCardRead,
    GiftCardRedeem,
    GiftCardRedemption,
    GiftCardUse,
    GiftCardVerification,
    PaymentIntentRead,
)
from tablebook.schemas.restaurant import (
    RestaurantContact,
    RestaurantCreate,
    RestaurantRead,
)

__all__ = [
    "AvailableTable",
    "BookingConfig",
    "BookingCreate",
    "BookingRead",
    "BookingStatusUpdate",
    "BookingWithRestaurant",
    "DayAvailability",
    "GiftCardConfirm",
    "GiftCardPurchaseCreate",
    "GiftCardRead",
    "GiftCardRedeem",
    "GiftCardRedemption",
    "GiftCardUse",
    "GiftCardVerification",
    "PaymentIntentRead",
    "RegularSchedule",
    "RestaurantContact",
    "RestaurantCreate",
    "RestaurantRead",
    "SlotAvailability",
    "SpecialDate",
    "TableSpec",
    "TimeSlot",
]
