"""Gift card API integration tests."""

from __future__ import annotations

from collections.abc import Iterator
from decimal import Decimal
from email.message import EmailMessage
from typing import Any

import pytest
from httpx import AsyncClient

from tablebook.api import deps
from tablebook.core.config import get_settings
from tablebook.main import app
from tablebook.services import notification_service

pytestmark = pytest.mark.asyncio


@pytest.fixture()
def provider_override(payment_provider) -> Iterator[Any]:
    app.dependency_overrides[deps.get_payment_provider] = lambda: payment_provider
    try:
        yield payment_provider
    finally:
        app.dependency_overrides.pop(deps.get_payment_provider, None)


def _purchase(restaurant_id: str, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "restaurant_id": restaurant_id,
        "amount": "50.00",
        "recipient_name": "Camille Petit",
        "recipient_email": "camille@example.com",
        "sender_name": "Dominique Petit",
        "sender_email": "dominique@example.com",
        "message": "Joyeux anniversaire",
    }
    payload.update(overrides)
    return payload


async def _buy(client: AsyncClient, provider: Any, restaurant_id: str) -> dict[str, Any]:
    intent_resp = await client.post(
        "/api/v1/gift-cards/payment-intents", json=_purchase(restaurant_id)
    )
    assert intent_resp.status_code == 201
    intent_id = intent_resp.json()["payment_intent_id"]
    provider.settle(intent_id)
    confirm_resp = await client.post(
        "/api/v1/gift-cards/confirm",
        json={"payment_intent_id": intent_id, "restaurant_id": restaurant_id},
    )
    assert confirm_resp.status_code == 201
    return confirm_resp.json()


async def test_purchase_and_confirm(
    app_context: dict[str, object], provider_override: Any
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    restaurant_id = app_context["restaurant_id"]

    intent_resp = await client.post(
        "/api/v1/gift-cards/payment-intents", json=_purchase(restaurant_id)
    )
    assert intent_resp.status_code == 201
    intent = intent_resp.json()
    assert intent["client_secret"].startswith(intent["payment_intent_id"])
    assert Decimal(intent["amount"]) == Decimal("50")
    assert intent["currency"] == "eur"

    confirm_payload = {
        "payment_intent_id": intent["payment_intent_id"],
        "restaurant_id": restaurant_id,
    }
    unpaid = await client.post("/api/v1/gift-cards/confirm", json=confirm_payload)
    assert unpaid.status_code == 400

    provider_override.settle(intent["payment_intent_id"])
    issued = await client.post("/api/v1/gift-cards/confirm", json=confirm_payload)
    assert issued.status_code == 201
    card = issued.json()
    assert card["code"].startswith("LAM-")
    assert card["status"] == "active"
    assert Decimal(card["remaining_amount"]) == Decimal("50")

    repeated = await client.post("/api/v1/gift-cards/confirm", json=confirm_payload)
    assert repeated.status_code == 200
    assert repeated.json()["id"] == card["id"]

    unknown_intent = await client.post(
        "/api/v1/gift-cards/confirm",
        json={"payment_intent_id": "pi_missing", "restaurant_id": restaurant_id},
    )
    assert unknown_intent.status_code == 502


async def test_purchase_validation(
    app_context: dict[str, object], provider_override: Any
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    restaurant_id = app_context["restaurant_id"]

    negative = await client.post(
        "/api/v1/gift-cards/payment-intents", json=_purchase(restaurant_id, amount="-5")
    )
    assert negative.status_code == 422

    bad_email = await client.post(
        "/api/v1/gift-cards/payment-intents",
        json=_purchase(restaurant_id, recipient_email="camille"),
    )
    assert bad_email.status_code == 422

    unknown = await client.post(
        "/api/v1/gift-cards/payment-intents", json=_purchase("nowhere")
    )
    assert unknown.status_code == 404


async def test_payments_require_configuration(
    app_context: dict[str, object], monkeypatch: pytest.MonkeyPatch
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    restaurant_id = app_context["restaurant_id"]

    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    get_settings.cache_clear()
    try:
        resp = await client.post(
            "/api/v1/gift-cards/payment-intents", json=_purchase(restaurant_id)
        )
    finally:
        get_settings.cache_clear()

    assert resp.status_code == 503


async def test_verify_redeem_and_use(
    app_context: dict[str, object], provider_override: Any
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    restaurant_id = app_context["restaurant_id"]
    card = await _buy(client, provider_override, restaurant_id)

    verify = await client.get(
        f"/api/v1/gift-cards/verify/{card['code']}",
        params={"restaurant_id": restaurant_id},
    )
    assert verify.status_code == 200
    assert Decimal(verify.json()["remaining_amount"]) == Decimal("50")
    assert verify.json()["expires_on"] == card["expires_on"]

    no_restaurant = await client.get(f"/api/v1/gift-cards/verify/{card['code']}")
    assert no_restaurant.status_code == 422

    missing = await client.get(
        "/api/v1/gift-cards/verify/LAM-ZZZZZZZZ", params={"restaurant_id": restaurant_id}
    )
    assert missing.status_code == 404

    redeem = await client.post(
        "/api/v1/gift-cards/redeem",
        json={"code": card["code"], "restaurant_id": restaurant_id, "amount": "20"},
    )
    assert redeem.status_code == 200
    assert Decimal(redeem.json()["remaining_amount"]) == Decimal("30")
    assert redeem.json()["status"] == "active"

    overdraw = await client.post(
        "/api/v1/gift-cards/redeem",
        json={"code": card["code"], "restaurant_id": restaurant_id, "amount": "40"},
    )
    assert overdraw.status_code == 400

    use = await client.put(
        f"/api/v1/gift-cards/{card['id']}/use", json={"restaurant_id": restaurant_id}
    )
    assert use.status_code == 200
    assert use.json()["status"] == "used"
    assert Decimal(use.json()["used_amount"]) == Decimal("50")

    spent = await client.get(
        f"/api/v1/gift-cards/verify/{card['code']}",
        params={"restaurant_id": restaurant_id},
    )
    assert spent.status_code == 400

    listing = await client.get(
        "/api/v1/gift-cards", params={"unused": "true", "restaurant_id": restaurant_id}
    )
    assert listing.status_code == 200
    assert listing.json() == []

    by_name = await client.get("/api/v1/gift-cards", params={"name": "camille"})
    assert [item["id"] for item in by_name.json()] == [card["id"]]


async def test_issued_card_emails_recipient_and_sender(
    app_context: dict[str, object],
    provider_override: Any,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    client: AsyncClient = app_context["client"]  # type: ignore[assignment]
    restaurant_id = app_context["restaurant_id"]

    monkeypatch.setenv("SMTP_HOST", "smtp.test")
    monkeypatch.setenv("SMTP_PORT", "2525")
    get_settings.cache_clear()

    sent: list[EmailMessage] = []

    class _RecordingSMTP:
        def __init__(self, host: str, port: int, timeout: int = 0) -> None:
            pass

        def __enter__(self) -> "_RecordingSMTP":
            return self

        def __exit__(self, *exc_info: object) -> None:
            return None

        def send_message(self, message: EmailMessage) -> None:
            sent.append(message)

    monkeypatch.setattr(notification_service.smtplib, "SMTP", _RecordingSMTP)

    try:
        card = await _buy(client, provider_override, restaurant_id)
    finally:
        get_settings.cache_clear()

    assert sorted(message["To"] for message in sent) == [
        "camille@example.com",
        "dominique@example.com",
    ]
    recipient_mail = next(m for m in sent if m["To"] == "camille@example.com")
    html = recipient_mail.get_body(preferencelist=("html",)).get_content()
    assert card["code"] in html
    assert "Joyeux anniversaire" in html
