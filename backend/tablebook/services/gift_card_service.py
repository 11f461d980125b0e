"""Gift card purchase, issuance and redemption services."""

from __future__ import annotations

import datetime as dt
import logging
import secrets
import uuid
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.core.config import get_settings
from tablebook.integrations.payments import PaymentIntent, PaymentProvider
from tablebook.models.gift_card import GiftCard, GiftCardStatus
from tablebook.models.restaurant import Restaurant
from tablebook.services import restaurant_service
from tablebook.services.errors import (
    ConfirmationCodeCollision,
    GiftCardError,
    GiftCardExpired,
    GiftCardInactive,
    GiftCardNotFound,
    InsufficientGiftCardBalance,
    PaymentNotCompleted,
)

logger = logging.getLogger(__name__)

GIFT_CARD_PAYMENT_TYPE: Final = "gift_card"
CODE_LENGTH: Final = 8
_CODE_ALPHABET: Final = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
_CURRENCY_UNIT: Final = Decimal("0.01")


def _to_money(value: Decimal | float | str) -> Decimal:
    return Decimal(value).quantize(_CURRENCY_UNIT, rounding=ROUND_HALF_UP)


def code_prefix(restaurant_name: str) -> str:
    letters = "".join(char for char in restaurant_name.upper() if char.isalnum())
    return (letters or "GFT")[:3]


def generate_code(prefix: str) -> str:
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(CODE_LENGTH))
    return f"{prefix}-{suffix}"


def expiry_after(issued_on: dt.date, years: int) -> dt.date:
    """Same calendar day ``years`` later; 29 February falls back to the 28th."""
    try:
        return issued_on.replace(year=issued_on.year + years)
    except ValueError:
        return issued_on.replace(year=issued_on.year + years, day=28)


async def _code_exists(session: AsyncSession, code: str) -> bool:
    result = await session.execute(select(GiftCard.id).where(GiftCard.code == code))
    return result.first() is not None


async def _generate_unique_code(
    session: AsyncSession, restaurant: Restaurant, *, attempts: int
) -> str:
    prefix = code_prefix(restaurant.name)
    for _ in range(attempts):
        candidate = generate_code(prefix)
        if not await _code_exists(session, candidate):
            return candidate
    logger.error("No free gift card code after %d attempts", attempts)
    raise ConfirmationCodeCollision("Failed to generate a unique gift card code")


async def _find_by_payment_intent(
    session: AsyncSession, payment_intent_id: str
) -> GiftCard | None:
    result = await session.execute(
        select(GiftCard).where(GiftCard.payment_intent_id == payment_intent_id)
    )
    return result.scalar_one_or_none()


async def _find_by_code(
    session: AsyncSession, *, code: str, restaurant_id: str
) -> GiftCard | None:
    result = await session.execute(
        select(GiftCard).where(
            GiftCard.code == code.strip().upper(),
            GiftCard.restaurant_id == restaurant_id,
        )
    )
    return result.scalar_one_or_none()


async def start_gift_card_purchase(
    session: AsyncSession,
    *,
    provider: PaymentProvider,
    restaurant_id: str,
    amount: Decimal,
    recipient_name: str,
    recipient_email: str,
    sender_name: str,
    sender_email: str,
    message: str | None = None,
) -> PaymentIntent:
    """Open a payment for a gift card; the card is issued once it succeeds."""
    normalized_amount = _to_money(amount)
    if normalized_amount <= Decimal("0"):
        raise GiftCardError("Gift card amount must be positive")
    restaurant = await restaurant_service.get_restaurant(
        session, restaurant_id, require_active=True
    )

    metadata = {
        "type": GIFT_CARD_PAYMENT_TYPE,
        "restaurant_id": restaurant.id,
        "recipient_name": recipient_name,
        "recipient_email": recipient_email,
        "sender_name": sender_name,
        "sender_email": sender_email,
    }
    if message:
        metadata["message"] = message

    intent = provider.create_payment_intent(
        amount=normalized_amount,
        currency=get_settings().gift_card_currency,
        metadata=metadata,
        receipt_email=sender_email,
    )
    logger.info(
        "Opened gift card payment %s for %s (%s %s)",
        intent.id,
        restaurant.id,
        normalized_amount,
        intent.currency,
    )
    return intent


async def issue_gift_card(
    session: AsyncSession,
    *,
    provider: PaymentProvider,
    payment_intent_id: str,
    restaurant_id: str,
    today: dt.date | None = None,
) -> tuple[GiftCard, bool]:
    """Turn a settled payment into a gift card.

    Returns the card and whether it was created by this call. Confirming the
    same payment twice returns the card issued the first time.
    """
    restaurant = await restaurant_service.get_restaurant(session, restaurant_id)

    existing = await _find_by_payment_intent(session, payment_intent_id)
    if existing is not None:
        if existing.restaurant_id != restaurant.id:
            raise GiftCardError("Payment belongs to a gift card of another restaurant")
        return existing, False

    intent = provider.retrieve_payment_intent(payment_intent_id)
    if not intent.succeeded:
        raise PaymentNotCompleted(intent.status)
    metadata = intent.metadata
    if (
        metadata.get("type") != GIFT_CARD_PAYMENT_TYPE
        or metadata.get("restaurant_id") != restaurant.id
    ):
        raise GiftCardError("Payment was not made for a gift card at this restaurant")

    settings = get_settings()
    today = today or restaurant_service.restaurant_today(restaurant)
    card = GiftCard(
        restaurant_id=restaurant.id,
        code=await _generate_unique_code(
            session, restaurant, attempts=settings.confirmation_code_attempts
        ),
        amount=_to_money(intent.amount),
        used_amount=Decimal("0.00"),
        currency=intent.currency,
        recipient_name=metadata.get("recipient_name", ""),
        recipient_email=metadata.get("recipient_email", ""),
        sender_name=metadata.get("sender_name", ""),
        sender_email=metadata.get("sender_email", ""),
        message=metadata.get("message"),
        status=GiftCardStatus.ACTIVE,
        expires_on=expiry_after(today, settings.gift_card_validity_years),
        payment_intent_id=intent.id,
    )
    session.add(card)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        # A concurrent confirmation of the same payment won.
        existing = await _find_by_payment_intent(session, payment_intent_id)
        if existing is None:
            raise
        return existing, False
    await session.refresh(card)
    logger.info(
        "Issued gift card %s for %s worth %s %s, valid until %s",
        card.code,
        restaurant.id,
        card.amount,
        card.currency,
        card.expires_on.isoformat(),
    )
    return card, True


async def _require_usable(
    session: AsyncSession, card: GiftCard, today: dt.date
) -> None:
    if card.status != GiftCardStatus.ACTIVE:
        raise GiftCardInactive(card.status.value)
    if today > card.expires_on:
        card.status = GiftCardStatus.EXPIRED
        await session.commit()
        logger.info("Gift card %s expired on %s", card.code, card.expires_on.isoformat())
        raise GiftCardExpired()


async def _restaurant_today(
    session: AsyncSession, restaurant_id: str, today: dt.date | None
) -> dt.date:
    restaurant = await restaurant_service.get_restaurant(session, restaurant_id)
    return today or restaurant_service.restaurant_today(restaurant)


async def verify_gift_card(
    session: AsyncSession,
    *,
    code: str,
    restaurant_id: str,
    today: dt.date | None = None,
) -> GiftCard:
    """Return a card that can still be spent at ``restaurant_id``.

    A card found past its expiry date is marked expired before the error is raised.
    """
    today = await _restaurant_today(session, restaurant_id, today)
    card = await _find_by_code(session, code=code, restaurant_id=restaurant_id)
    if card is None:
        raise GiftCardNotFound()
    await _require_usable(session, card, today)
    return card


async def redeem_gift_card(
    session: AsyncSession,
    *,
    code: str,
    restaurant_id: str,
    amount: Decimal,
    today: dt.date | None = None,
) -> GiftCard:
    """Spend part or all of a card's balance."""
    spend = _to_money(amount)
    if spend <= Decimal("0"):
        raise GiftCardError("Redemption amount must be positive")

    card = await verify_gift_card(
        session, code=code, restaurant_id=restaurant_id, today=today
    )
    if spend > card.remaining_amount:
        raise InsufficientGiftCardBalance(card.remaining_amount)

    # Guarded so two concurrent redemptions cannot overdraw the card.
    result = await session.execute(
        update(GiftCard)
        .where(
            GiftCard.id == card.id,
            GiftCard.status == GiftCardStatus.ACTIVE,
            GiftCard.used_amount + spend <= GiftCard.amount,
        )
        .values(used_amount=GiftCard.used_amount + spend)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        await session.refresh(card)
        raise InsufficientGiftCardBalance(card.remaining_amount)

    await session.refresh(card)
    if card.remaining_amount <= Decimal("0"):
        card.status = GiftCardStatus.USED
    await session.commit()
    await session.refresh(card)
    logger.info(
        "Redeemed %s from gift card %s (remaining %s, %s)",
        spend,
        card.code,
        card.remaining_amount,
        card.status.value,
    )
    return card


async def mark_gift_card_used(
    session: AsyncSession,
    *,
    gift_card_id: uuid.UUID,
    restaurant_id: str,
    today: dt.date | None = None,
) -> GiftCard:
    """Spend a card's whole balance at once."""
    today = await _restaurant_today(session, restaurant_id, today)
    card = await session.get(GiftCard, gift_card_id)
    if card is None or card.restaurant_id != restaurant_id:
        raise GiftCardNotFound()
    await _require_usable(session, card, today)

    card.used_amount = card.amount
    card.status = GiftCardStatus.USED
    await session.commit()
    await session.refresh(card)
    logger.info("Gift card %s marked as used", card.code)
    return card


async def list_gift_cards(
    session: AsyncSession,
    *,
    name: str | None = None,
    code: str | None = None,
    unused: bool = False,
    restaurant_id: str | None = None,
) -> Sequence[GiftCard]:
    """Gift cards, newest first.

    ``name`` and ``code`` match anywhere in the recipient name and the code,
    ignoring case; ``unused`` keeps only active cards.
    """
    stmt = select(GiftCard)
    if name:
        stmt = stmt.where(
            func.lower(GiftCard.recipient_name).contains(name.lower(), autoescape=True)
        )
    if code:
        stmt = stmt.where(
            func.upper(GiftCard.code).contains(code.strip().upper(), autoescape=True)
        )
    if unused:
        stmt = stmt.where(GiftCard.status == GiftCardStatus.ACTIVE)
    if restaurant_id:
        stmt = stmt.where(GiftCard.restaurant_id == restaurant_id)
    stmt = stmt.order_by(GiftCard.created_at.desc(), GiftCard.code.asc())
    result = await session.execute(stmt)
    return result.scalars().all()
