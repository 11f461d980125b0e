"""Integration shortcuts."""

from .payments import (
    PaymentIntent,
    PaymentProvider,
    PaymentProviderError,
    StripePaymentProvider,
)

__all__ = [
    "PaymentIntent",
    "PaymentProvider",
    "PaymentProviderError",
    "StripePaymentProvider",
]
