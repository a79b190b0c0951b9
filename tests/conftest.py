"""Shared test configuration and fixtures.

Engine and API tests run against the in-process store, which enforces the
same uniqueness and overlap constraints as the PostgreSQL schema. Each test
gets a fresh store, so no cleanup is needed.
"""

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from frontdesk.api.deps import get_engine
from frontdesk.auth.jwt import create_access_token
from frontdesk.config import Settings
from frontdesk.engine.records import (
    Actor,
    BookingRequest,
    ContactInfo,
    RoomRecord,
    RoomTypeRecord,
)
from frontdesk.engine.service import BookingEngine
from frontdesk.main import app
from frontdesk.notifications.notifier import LoggingNotifier
from frontdesk.notifications.outbox import NotificationOutbox
from frontdesk.storage.memory import InMemoryStore

STAFF_ID = "staff-001"
STAFF_NAME = "Front Desk"

# ---------------------------------------------------------------------------
# Engine wiring
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        hotel_name="Test Hotel",
        allow_placeholder_guests=True,
        notification_max_attempts=3,
        notification_retry_delay_seconds=0,
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier("Test Hotel")


@pytest.fixture
def outbox(notifier: LoggingNotifier) -> NotificationOutbox:
    return NotificationOutbox(notifier, max_attempts=3, retry_delay=0)


@pytest.fixture
def engine(store: InMemoryStore, test_settings: Settings, outbox: NotificationOutbox) -> BookingEngine:
    return BookingEngine(store, test_settings, outbox)


@pytest.fixture
def actor() -> Actor:
    return Actor(id=STAFF_ID, name=STAFF_NAME)


# ---------------------------------------------------------------------------
# Inventory: room types, rooms and catalogue records
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def room_types(store: InMemoryStore) -> dict[str, RoomTypeRecord]:
    standard = await store.room_types.create({"name": "Standard", "base_price": Decimal("100.00")})
    suite = await store.room_types.create({"name": "Suite", "base_price": Decimal("250.00")})
    return {"Standard": standard, "Suite": suite}


@pytest_asyncio.fixture
async def rooms(store: InMemoryStore, room_types: dict[str, RoomTypeRecord]) -> dict[str, RoomRecord]:
    """Rooms 101, 102 (Standard) and 201 (Suite), each with a catalogue record.

    Room 301 exists only in the catalogue and is materialised on first booking.
    """
    created = {}
    for number, type_name in (("101", "Standard"), ("102", "Standard"), ("201", "Suite")):
        room_type = room_types[type_name]
        created[number] = await store.rooms.create(
            {"room_number": number, "room_type_id": room_type.id, "price": room_type.base_price}
        )
        await store.properties.create(
            {
                "room_number": number,
                "name": f"{type_name} {number}",
                "property_type_id": room_type.id,
                "base_price": room_type.base_price,
            }
        )
    await store.properties.create(
        {
            "room_number": "301",
            "name": "Suite 301",
            "property_type_id": room_types["Suite"].id,
            "base_price": Decimal("260.00"),
        }
    )
    return created


@pytest.fixture
def make_request():
    """Factory for booking requests with sensible defaults."""

    def _make(
        room_number: str = "101",
        check_in: date = date(2025, 3, 10),
        check_out: date = date(2025, 3, 12),
        name: str = "Jane Doe",
        email: str = "jane@example.com",
        **overrides,
    ) -> BookingRequest:
        return BookingRequest(
            guest=ContactInfo(full_name=name, email=email, phone="+15550100"),
            room_number=room_number,
            check_in=check_in,
            check_out=check_out,
            total_price=overrides.pop("total_price", Decimal("200.00")),
            **overrides,
        )

    return _make


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(engine: BookingEngine) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to the in-memory engine."""
    app.dependency_overrides[get_engine] = lambda: engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Return Authorization headers for the front desk staff member."""
    token = create_access_token(STAFF_ID, STAFF_NAME)
    return {"Authorization": f"Bearer {token}"}
