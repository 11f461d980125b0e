"""Test fixtures for the table booking backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from tablebook.core.config import get_settings
from tablebook.db.base import Base
from tablebook.db.session import dispose_engine, get_sessionmaker
from tablebook.integrations.payments import PaymentIntent, PaymentProviderError
from tablebook.main import app
from tablebook.models import Restaurant
from tablebook.schemas.booking_config import (
    WEEKDAYS,
    BookingConfig,
    RegularSchedule,
    TableSpec,
    TimeSlot,
)

DEMO_RESTAURANT_ID = "demo-restaurant"


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest.fixture()
def booking_config() -> BookingConfig:
    """Three two-seaters and one eight-seater, open every day."""
    slots = (
        TimeSlot(hour="13:00", capacity=14),
        TimeSlot(hour="14:00", capacity=14),
        TimeSlot(hour="20:00", capacity=14),
    )
    return BookingConfig(
        regular_schedule=RegularSchedule(**{day: slots for day in WEEKDAYS}),
        tables=(
            TableSpec(number=1, capacity=2),
            TableSpec(number=2, capacity=2),
            TableSpec(number=3, capacity=2),
            TableSpec(number=4, capacity=8),
        ),
        min_guests_per_booking=1,
        max_guests_per_booking=10,
        advance_booking_days=30,
    )


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest_asyncio.fixture()
async def demo_restaurant(
    reset_database: None, db_url: str, booking_config: BookingConfig
) -> str:
    """Seed the demo restaurant and return its id."""
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        session.add(
            Restaurant(
                id=DEMO_RESTAURANT_ID,
                name="La Maison Gourmet",
                timezone="UTC",
                contact_phone="+33 1 23 45 67 89",
                contact_email="contact@lamaison.example.com",
                address="12 Rue de la Paix, Paris",
                booking_config=booking_config.model_dump(mode="json"),
            )
        )
        await session.commit()
    return DEMO_RESTAURANT_ID


@pytest_asyncio.fixture()
async def session(demo_restaurant: str, db_url: str) -> AsyncIterator[AsyncSession]:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as db_session:
        yield db_session


@pytest_asyncio.fixture()
async def app_context(demo_restaurant: str) -> AsyncIterator[dict[str, object]]:
    """Yield an async client and the seeded restaurant id."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield {"client": client, "restaurant_id": demo_restaurant}


class FakePaymentProvider:
    """In-memory payment intents; ``settle`` plays the card holder paying."""

    def __init__(self) -> None:
        self.intents: dict[str, PaymentIntent] = {}

    def create_payment_intent(
        self,
        *,
        amount: Decimal,
        currency: str,
        metadata: dict[str, str],
        receipt_email: str | None = None,
    ) -> PaymentIntent:
        intent_id = f"pi_test_{len(self.intents) + 1}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret",
            status="requires_payment_method",
            amount=amount,
            currency=currency,
            metadata=dict(metadata),
        )
        self.intents[intent_id] = intent
        return intent

    def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentIntent:
        try:
            return self.intents[payment_intent_id]
        except KeyError as exc:
            raise PaymentProviderError("Failed to retrieve payment intent") from exc

    def settle(self, payment_intent_id: str, status: str = "succeeded") -> None:
        self.intents[payment_intent_id].status = status


@pytest.fixture()
def payment_provider() -> FakePaymentProvider:
    return FakePaymentProvider()
