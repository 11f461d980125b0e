"""Pydantic schemas for gift cards."""
from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tablebook.models.gift_card import GiftCardStatus


class GiftCardPurchaseCreate(BaseModel):
    """Payload for starting a gift card purchase."""

    restaurant_id: str
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    recipient_name: str = Field(min_length=1, max_length=255)
    recipient_email: EmailStr
    sender_name: str = Field(min_length=1, max_length=255)
    sender_email: EmailStr
    message: str | None = Field(default=None, max_length=500)


class PaymentIntentRead(BaseModel):
    """What the client needs to complete the card payment."""

    payment_intent_id: str
    client_secret: str | None
    amount: Decimal
    currency: str


class GiftCardConfirm(BaseModel):
    payment_intent_id: str = Field(min_length=1)
    restaurant_id: str


class GiftCardRead(BaseModel):
    """Serialized gift card representation."""

    id: uuid.UUID
    restaurant_id: str
    code: str
    amount: Decimal
    used_amount: Decimal
    remaining_amount: Decimal
    currency: str
    recipient_name: str
    recipient_email: str
    sender_name: str
    sender_email: str
    message: str | None = None
    status: GiftCardStatus
    expires_on: dt.date
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class GiftCardVerification(BaseModel):
    """Balance of a card that can still be spent."""

    code: str
    amount: Decimal
    remaining_amount: Decimal
    currency: str
    expires_on: dt.date

    model_config = ConfigDict(from_attributes=True)


class GiftCardRedeem(BaseModel):
    code: str = Field(min_length=1)
    restaurant_id: str
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)


class GiftCardRedemption(BaseModel):
    code: str
    remaining_amount: Decimal
    status: GiftCardStatus

    model_config = ConfigDict(from_attributes=True)


class GiftCardUse(BaseModel):
    restaurant_id: str
