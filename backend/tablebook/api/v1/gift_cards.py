"""Gift card API."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    Response,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from tablebook.api import deps
from tablebook.integrations.payments import PaymentProvider, PaymentProviderError
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
from tablebook.services import gift_card_service, notification_service, restaurant_service

router = APIRouter()


def _provider_error(exc: PaymentProviderError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get("", response_model=list[GiftCardRead], summary="List gift cards")
async def list_gift_cards(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    name: str | None = None,
    code: str | None = None,
    unused: bool = False,
    restaurant_id: str | None = None,
) -> list[GiftCardRead]:
    cards = await gift_card_service.list_gift_cards(
        session, name=name, code=code, unused=unused, restaurant_id=restaurant_id
    )
    return [GiftCardRead.model_validate(card) for card in cards]


@router.post(
    "/payment-intents",
    response_model=PaymentIntentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Start a gift card purchase",
)
async def create_payment_intent(
    payload: GiftCardPurchaseCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    provider: Annotated[PaymentProvider, Depends(deps.get_payment_provider)],
) -> PaymentIntentRead:
    try:
        intent = await gift_card_service.start_gift_card_purchase(
            session, provider=provider, **payload.model_dump()
        )
    except PaymentProviderError as exc:
        raise _provider_error(exc) from exc
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return PaymentIntentRead(
        payment_intent_id=intent.id,
        client_secret=intent.client_secret,
        amount=intent.amount,
        currency=intent.currency,
    )


@router.post("/confirm", response_model=GiftCardRead, summary="Issue a paid gift card")
async def confirm_gift_card(
    payload: GiftCardConfirm,
    response: Response,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    provider: Annotated[PaymentProvider, Depends(deps.get_payment_provider)],
    background_tasks: BackgroundTasks,
) -> GiftCardRead:
    try:
        card, created = await gift_card_service.issue_gift_card(
            session,
            provider=provider,
            payment_intent_id=payload.payment_intent_id,
            restaurant_id=payload.restaurant_id,
        )
    except PaymentProviderError as exc:
        raise _provider_error(exc) from exc
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    if created:
        response.status_code = status.HTTP_201_CREATED
        restaurant = await restaurant_service.get_restaurant(session, card.restaurant_id)
        notification_service.notify_gift_card_issued(card, restaurant, background_tasks)
    return GiftCardRead.model_validate(card)


@router.get(
    "/verify/{code}",
    response_model=GiftCardVerification,
    summary="Check a gift card balance",
)
async def verify_gift_card(
    code: str,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    restaurant_id: Annotated[str, Query(min_length=1)],
) -> GiftCardVerification:
    try:
        card = await gift_card_service.verify_gift_card(
            session, code=code, restaurant_id=restaurant_id
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return GiftCardVerification.model_validate(card)


@router.post("/redeem", response_model=GiftCardRedemption, summary="Spend from a gift card")
async def redeem_gift_card(
    payload: GiftCardRedeem,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> GiftCardRedemption:
    try:
        card = await gift_card_service.redeem_gift_card(
            session,
            code=payload.code,
            restaurant_id=payload.restaurant_id,
            amount=payload.amount,
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return GiftCardRedemption.model_validate(card)


@router.put(
    "/{gift_card_id}/use",
    response_model=GiftCardRead,
    summary="Mark a gift card as fully used",
)
async def use_gift_card(
    gift_card_id: uuid.UUID,
    payload: GiftCardUse,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> GiftCardRead:
    try:
        card = await gift_card_service.mark_gift_card_used(
            session, gift_card_id=gift_card_id, restaurant_id=payload.restaurant_id
        )
    except ValueError as exc:
        raise deps.http_error(exc) from exc
    return GiftCardRead.model_validate(card)
