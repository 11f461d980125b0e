"""ORM models package export."""

from tablebook.models.booking import Booking, BookingStatus, BookingTableClaim
from tablebook.models.gift_card import GiftCard, GiftCardStatus
from tablebook.models.restaurant import Restaurant

__all__ = [
    "Booking",
    "BookingStatus",
    "BookingTableClaim",
    "GiftCard",
    "GiftCardStatus",
    "Restaurant",
]
