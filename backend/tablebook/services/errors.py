"""Error kinds raised by the service layer."""

from __future__ import annotations

from decimal import Decimal


class BookingError(ValueError):
    """Base class for booking validation and lifecycle failures."""


class RestaurantNotFound(BookingError):
    def __init__(self, restaurant_id: str) -> None:
        super().__init__(f"Restaurant {restaurant_id!r} not found")
        self.restaurant_id = restaurant_id


class RestaurantAlreadyExists(BookingError):
    def __init__(self, restaurant_id: str) -> None:
        super().__init__(f"Restaurant id {restaurant_id!r} already exists")
        self.restaurant_id = restaurant_id


class BookingNotFound(BookingError):
    pass


class GuestCountOutOfRange(BookingError):
    def __init__(self, guests: int, minimum: int, maximum: int) -> None:
        super().__init__(
            f"Number of guests must be between {minimum} and {maximum} (got {guests})"
        )
        self.guests = guests
        self.minimum = minimum
        self.maximum = maximum


class BookingWindowExceeded(BookingError):
    def __init__(self, advance_booking_days: int) -> None:
        super().__init__(
            "Bookings can only be made from today up to "
            f"{advance_booking_days} days in advance"
        )
        self.advance_booking_days = advance_booking_days


class SlotUnavailable(BookingError):
    """The day is closed or the hour is not offered."""


class InsufficientCapacity(BookingError):
    def __init__(self, free_capacity: int, message: str | None = None) -> None:
        super().__init__(message or "Not enough free table capacity for this time slot")
        self.free_capacity = free_capacity


class ConfirmationCodeCollision(BookingError):
    """Every generated confirmation code was already taken."""


class BookingConflict(BookingError):
    """Concurrent bookings kept claiming the same tables."""


class AlreadyCancelled(BookingError):
    def __init__(self) -> None:
        super().__init__("Booking is already cancelled")


class InvalidStatusTransition(BookingError):
    pass


class NotificationDeliveryFailed(RuntimeError):
    """Raised when a notification could not be handed to the mail server."""


class GiftCardError(ValueError):
    """Base class for gift card purchase and redemption failures."""


class GiftCardNotFound(GiftCardError):
    def __init__(self) -> None:
        super().__init__("Gift card not found for this restaurant")


class GiftCardInactive(GiftCardError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Gift card is not active (status: {status})")
        self.status = status


class GiftCardExpired(GiftCardError):
    def __init__(self) -> None:
        super().__init__("Gift card has expired")


class InsufficientGiftCardBalance(GiftCardError):
    def __init__(self, remaining_amount: Decimal) -> None:
        super().__init__(
            f"Gift card balance is insufficient (remaining: {remaining_amount})"
        )
        self.remaining_amount = remaining_amount


class PaymentNotCompleted(GiftCardError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Payment has not completed (status: {status})")
        self.status = status
