"""Card payment provider used to settle gift card purchases."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

import stripe

SUCCEEDED = "succeeded"


@dataclass(slots=True)
class PaymentIntent:
    """Simplified payment intent payload."""

    id: str
    client_secret: str | None
    status: str
    amount: Decimal
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == SUCCEEDED


class PaymentProviderError(RuntimeError):
    """Raised when the payment provider cannot be reached or rejects a call."""


class PaymentProvider(Protocol):
    def create_payment_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        metadata: dict[str, str],
        receipt_email: str | None = None,
    ) -> PaymentIntent: ...

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent: ...


def to_cents(amount: Decimal) -> int:
    quantized = amount.quantize(Decimal("0.01"))
    return int((quantized * 100).to_integral_value())


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(Decimal("0.01"))


class StripePaymentProvider:
    """Payment intents on Stripe."""

    def __init__(self, secret_key: str, *, max_network_retries: int = 2) -> None:
        self._secret_key = secret_key
        stripe.max_network_retries = max_network_retries

    @staticmethod
    def _to_intent(intent: Any) -> PaymentIntent:
        metadata = intent.metadata or {}
        return PaymentIntent(
            id=str(intent.id),
            client_secret=intent.client_secret,
            status=str(intent.status),
            amount=from_cents(int(intent.amount)),
            currency=str(intent.currency),
            metadata={key: str(metadata[key]) for key in metadata.keys()},
        )

    def create_payment_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        metadata: dict[str, str],
        receipt_email: str | None = None,
    ) -> PaymentIntent:
        kwargs: dict[str, Any] = {
            "amount": to_cents(amount),
            "currency": currency,
            "metadata": metadata,
            "automatic_payment_methods": {"enabled": True},
        }
        if receipt_email:
            kwargs["receipt_email"] = receipt_email
        try:
            intent = stripe.PaymentIntent.create(api_key=self._secret_key, **kwargs)
        except stripe.StripeError as exc:
            raise PaymentProviderError("Failed to create payment intent") from exc
        return self._to_intent(intent)

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            intent = stripe.PaymentIntent.retrieve(
                payment_intent_id, api_key=self._secret_key
            )
        except stripe.StripeError as exc:
            raise PaymentProviderError("Failed to retrieve payment intent") from exc
        return self._to_intent(intent)
