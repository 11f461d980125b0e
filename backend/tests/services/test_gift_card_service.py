"""Tests for gift card issuance and redemption."""

from __future__ import annotations

import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.integrations.payments import PaymentProviderError
from tablebook.models import GiftCard, GiftCardStatus
from tablebook.schemas.restaurant import RestaurantCreate
from tablebook.services import gift_card_service, restaurant_service
from tablebook.services.errors import (
    GiftCardError,
    GiftCardExpired,
    GiftCardInactive,
    GiftCardNotFound,
    InsufficientGiftCardBalance,
    PaymentNotCompleted,
    RestaurantNotFound,
)

pytestmark = pytest.mark.asyncio

TODAY = date(2030, 1, 7)


async def _issue(
    session: AsyncSession,
    provider,
    restaurant_id: str,
    *,
    amount: str = "50.00",
    recipient_name: str = "Camille Petit",
) -> GiftCard:
    intent = await gift_card_service.start_gift_card_purchase(
        session,
        provider=provider,
        restaurant_id=restaurant_id,
        amount=Decimal(amount),
        recipient_name=recipient_name,
        recipient_email="camille@example.com",
        sender_name="Dominique Petit",
        sender_email="dominique@example.com",
        message="Bon appetit!",
    )
    provider.settle(intent.id)
    card, created = await gift_card_service.issue_gift_card(
        session,
        provider=provider,
        payment_intent_id=intent.id,
        restaurant_id=restaurant_id,
        today=TODAY,
    )
    assert created is True
    return card


async def test_card_is_issued_only_after_payment(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    intent = await gift_card_service.start_gift_card_purchase(
        session,
        provider=payment_provider,
        restaurant_id=demo_restaurant,
        amount=Decimal("75"),
        recipient_name="Camille Petit",
        recipient_email="camille@example.com",
        sender_name="Dominique Petit",
        sender_email="dominique@example.com",
    )
    assert intent.amount == Decimal("75.00")
    assert intent.currency == "eur"
    assert intent.metadata["type"] == "gift_card"
    assert intent.metadata["restaurant_id"] == demo_restaurant
    assert "message" not in intent.metadata

    with pytest.raises(PaymentNotCompleted):
        await gift_card_service.issue_gift_card(
            session,
            provider=payment_provider,
            payment_intent_id=intent.id,
            restaurant_id=demo_restaurant,
            today=TODAY,
        )

    payment_provider.settle(intent.id)
    card, created = await gift_card_service.issue_gift_card(
        session,
        provider=payment_provider,
        payment_intent_id=intent.id,
        restaurant_id=demo_restaurant,
        today=TODAY,
    )
    assert created is True
    assert card.code.startswith("LAM-")
    assert len(card.code) == 4 + gift_card_service.CODE_LENGTH
    assert card.amount == Decimal("75.00")
    assert card.remaining_amount == Decimal("75.00")
    assert card.status == GiftCardStatus.ACTIVE
    assert card.expires_on == date(2031, 1, 7)
    assert card.recipient_email == "camille@example.com"

    again, created_again = await gift_card_service.issue_gift_card(
        session,
        provider=payment_provider,
        payment_intent_id=intent.id,
        restaurant_id=demo_restaurant,
        today=TODAY,
    )
    assert created_again is False
    assert again.id == card.id


async def test_failed_or_foreign_payments_are_rejected(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    intent = await gift_card_service.start_gift_card_purchase(
        session,
        provider=payment_provider,
        restaurant_id=demo_restaurant,
        amount=Decimal("30"),
        recipient_name="Camille Petit",
        recipient_email="camille@example.com",
        sender_name="Dominique Petit",
        sender_email="dominique@example.com",
    )
    payment_provider.settle(intent.id, status="canceled")
    with pytest.raises(PaymentNotCompleted, match="canceled"):
        await gift_card_service.issue_gift_card(
            session,
            provider=payment_provider,
            payment_intent_id=intent.id,
            restaurant_id=demo_restaurant,
            today=TODAY,
        )

    payment_provider.settle(intent.id)
    payment_provider.intents[intent.id].metadata["restaurant_id"] = "elsewhere"
    with pytest.raises(GiftCardError, match="this restaurant"):
        await gift_card_service.issue_gift_card(
            session,
            provider=payment_provider,
            payment_intent_id=intent.id,
            restaurant_id=demo_restaurant,
            today=TODAY,
        )

    with pytest.raises(PaymentProviderError):
        await gift_card_service.issue_gift_card(
            session,
            provider=payment_provider,
            payment_intent_id="pi_missing",
            restaurant_id=demo_restaurant,
            today=TODAY,
        )


async def test_purchase_validation(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    with pytest.raises(GiftCardError, match="positive"):
        await gift_card_service.start_gift_card_purchase(
            session,
            provider=payment_provider,
            restaurant_id=demo_restaurant,
            amount=Decimal("0"),
            recipient_name="Camille Petit",
            recipient_email="camille@example.com",
            sender_name="Dominique Petit",
            sender_email="dominique@example.com",
        )
    with pytest.raises(RestaurantNotFound):
        await gift_card_service.start_gift_card_purchase(
            session,
            provider=payment_provider,
            restaurant_id="nowhere",
            amount=Decimal("10"),
            recipient_name="Camille Petit",
            recipient_email="camille@example.com",
            sender_name="Dominique Petit",
            sender_email="dominique@example.com",
        )
    assert payment_provider.intents == {}


async def test_expiry_is_one_calendar_year_later() -> None:
    assert gift_card_service.expiry_after(date(2030, 1, 7), 1) == date(2031, 1, 7)
    assert gift_card_service.expiry_after(date(2028, 2, 29), 1) == date(2029, 2, 28)
    assert gift_card_service.code_prefix("Le Bistrot") == "LEB"
    assert gift_card_service.code_prefix("!!") == "GFT"


async def test_partial_redemption_until_spent(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    card = await _issue(session, payment_provider, demo_restaurant)

    after_first = await gift_card_service.redeem_gift_card(
        session,
        code=card.code.lower(),
        restaurant_id=demo_restaurant,
        amount=Decimal("20"),
        today=TODAY,
    )
    assert after_first.remaining_amount == Decimal("30.00")
    assert after_first.status == GiftCardStatus.ACTIVE

    with pytest.raises(InsufficientGiftCardBalance) as excinfo:
        await gift_card_service.redeem_gift_card(
            session,
            code=card.code,
            restaurant_id=demo_restaurant,
            amount=Decimal("40"),
            today=TODAY,
        )
    assert excinfo.value.remaining_amount == Decimal("30.00")

    spent = await gift_card_service.redeem_gift_card(
        session,
        code=card.code,
        restaurant_id=demo_restaurant,
        amount=Decimal("30"),
        today=TODAY,
    )
    assert spent.remaining_amount == Decimal("0.00")
    assert spent.status == GiftCardStatus.USED

    with pytest.raises(GiftCardInactive):
        await gift_card_service.verify_gift_card(
            session, code=card.code, restaurant_id=demo_restaurant, today=TODAY
        )


async def test_stale_card_is_marked_expired(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    card = await _issue(session, payment_provider, demo_restaurant)

    still_valid = await gift_card_service.verify_gift_card(
        session, code=card.code, restaurant_id=demo_restaurant, today=card.expires_on
    )
    assert still_valid.remaining_amount == Decimal("50.00")

    with pytest.raises(GiftCardExpired):
        await gift_card_service.verify_gift_card(
            session,
            code=card.code,
            restaurant_id=demo_restaurant,
            today=card.expires_on + timedelta(days=1),
        )

    await session.refresh(card)
    assert card.status == GiftCardStatus.EXPIRED
    with pytest.raises(GiftCardInactive):
        await gift_card_service.redeem_gift_card(
            session,
            code=card.code,
            restaurant_id=demo_restaurant,
            amount=Decimal("5"),
            today=TODAY,
        )


async def test_cards_belong_to_their_restaurant(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    card = await _issue(session, payment_provider, demo_restaurant)
    await restaurant_service.create_restaurant(
        session, payload=RestaurantCreate(id="le-bistrot", name="Le Bistrot")
    )

    with pytest.raises(GiftCardNotFound):
        await gift_card_service.verify_gift_card(
            session, code=card.code, restaurant_id="le-bistrot", today=TODAY
        )
    with pytest.raises(GiftCardNotFound):
        await gift_card_service.mark_gift_card_used(
            session, gift_card_id=card.id, restaurant_id="le-bistrot", today=TODAY
        )


async def test_mark_used_spends_whole_balance(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    card = await _issue(session, payment_provider, demo_restaurant, amount="40")

    used = await gift_card_service.mark_gift_card_used(
        session, gift_card_id=card.id, restaurant_id=demo_restaurant, today=TODAY
    )
    assert used.status == GiftCardStatus.USED
    assert used.used_amount == Decimal("40.00")
    assert used.remaining_amount == Decimal("0.00")

    with pytest.raises(GiftCardInactive):
        await gift_card_service.mark_gift_card_used(
            session, gift_card_id=card.id, restaurant_id=demo_restaurant, today=TODAY
        )
    with pytest.raises(GiftCardNotFound):
        await gift_card_service.mark_gift_card_used(
            session, gift_card_id=uuid.uuid4(), restaurant_id=demo_restaurant, today=TODAY
        )


async def test_listing_filters(
    session: AsyncSession, demo_restaurant: str, payment_provider
) -> None:
    camille = await _issue(session, payment_provider, demo_restaurant)
    noa = await _issue(
        session, payment_provider, demo_restaurant, recipient_name="Noa Martin"
    )
    await gift_card_service.mark_gift_card_used(
        session, gift_card_id=noa.id, restaurant_id=demo_restaurant, today=TODAY
    )

    everything = await gift_card_service.list_gift_cards(session)
    assert {card.id for card in everything} == {camille.id, noa.id}

    by_name = await gift_card_service.list_gift_cards(session, name="MARTIN")
    assert [card.id for card in by_name] == [noa.id]

    by_code = await gift_card_service.list_gift_cards(
        session, code=camille.code[-5:].lower()
    )
    assert [card.id for card in by_code] == [camille.id]

    unused = await gift_card_service.list_gift_cards(
        session, unused=True, restaurant_id=demo_restaurant
    )
    assert [card.id for card in unused] == [camille.id]

    elsewhere = await gift_card_service.list_gift_cards(session, restaurant_id="le-bistrot")
    assert list(elsewhere) == []
