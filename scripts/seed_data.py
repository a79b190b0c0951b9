"""Seed the database with a small hotel: room types, rooms, catalogue records and a few stays.

Bookings are placed through the booking engine so guests, room statuses and
housekeeping tasks come out exactly as they would from the API.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

# Add the repository root to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete

from frontdesk.auth.jwt import create_access_token
from frontdesk.config import settings
from frontdesk.database import async_session_factory, engine
from frontdesk.engine.records import (
    CHECKED_IN,
    CHECKED_OUT,
    Actor,
    BookingRequest,
    ContactInfo,
    utcnow,
)
from frontdesk.engine.service import BookingEngine
from frontdesk.models import Booking, Guest, HousekeepingTask, Property, Room, RoomType
from frontdesk.notifications.notifier import LoggingNotifier
from frontdesk.notifications.outbox import NotificationOutbox
from frontdesk.storage.sqlalchemy_store import SqlAlchemyStore

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

STAFF = Actor(id="seed-reception", name="Reception Desk")

ROOM_TYPES = [
    {"name": "Standard", "base_price": Decimal("80.00")},
    {"name": "Deluxe", "base_price": Decimal("120.00")},
    {"name": "Suite", "base_price": Decimal("220.00")},
]

# room number -> room type name
ROOMS = {
    "101": "Standard",
    "102": "Standard",
    "103": "Standard",
    "201": "Deluxe",
    "202": "Deluxe",
    "301": "Suite",
}

# Catalogue-only rooms, materialised on their first booking
CATALOGUE_ONLY = {
    "302": "Suite",
}

GUESTS = [
    ContactInfo(full_name="Amara Okafor", email="amara.okafor@example.com", phone="+2348012345678"),
    ContactInfo(full_name="Lukas Weber", email="lukas.weber@example.com", phone="+4915112345678"),
    ContactInfo(full_name="Mei Tanaka", email="mei.tanaka@example.com", phone="+819012345678"),
]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def _reset() -> dict[str, RoomType]:
    async with async_session_factory() as session:
        for model in (HousekeepingTask, Booking, Guest, Room, Property, RoomType):
            await session.execute(delete(model))
        await session.flush()

        room_types = {}
        for data in ROOM_TYPES:
            room_type = RoomType(**data)
            session.add(room_type)
            room_types[room_type.name] = room_type
        await session.flush()

        for number, type_name in {**ROOMS, **CATALOGUE_ONLY}.items():
            room_type = room_types[type_name]
            session.add(
                Property(
                    room_number=number,
                    name=f"{type_name} {number}",
                    property_type_id=room_type.id,
                    base_price=room_type.base_price,
                )
            )
            if number in ROOMS:
                session.add(Room(room_number=number, room_type_id=room_type.id, price=room_type.base_price))
        await session.commit()
        return room_types


async def seed() -> None:
    """Reset the inventory tables and place a handful of bookings."""
    room_types = await _reset()
    print(f"✅ Created {len(room_types)} room types, {len(ROOMS)} rooms, {len(ROOMS) + len(CATALOGUE_ONLY)} catalogue records")

    outbox = NotificationOutbox(LoggingNotifier(settings.hotel_name), max_attempts=1)
    booking_engine = BookingEngine(SqlAlchemyStore(async_session_factory), settings, outbox)
    today = utcnow().date()

    # A finished stay, an in-house guest and two upcoming arrivals
    past = await booking_engine.create_booking(
        BookingRequest(
            guest=GUESTS[0],
            room_number="101",
            check_in=today - timedelta(days=4),
            check_out=today - timedelta(days=1),
            total_price=Decimal("240.00"),
            amount_paid=Decimal("240.00"),
            payment_status="full",
            payment_method="card",
        ),
        STAFF,
    )
    await booking_engine.update_booking_status(past.id, CHECKED_IN, STAFF)
    await booking_engine.update_booking_status(past.id, CHECKED_OUT, STAFF)

    in_house = await booking_engine.create_booking(
        BookingRequest(
            guest=GUESTS[1],
            room_number="201",
            check_in=today,
            check_out=today + timedelta(days=3),
            total_price=Decimal("360.00"),
            amount_paid=Decimal("100.00"),
            payment_status="part",
            payment_method="cash",
        ),
        STAFF,
    )
    await booking_engine.update_booking_status(in_house.id, CHECKED_IN, STAFF)

    await booking_engine.create_booking(
        BookingRequest(
            guest=GUESTS[2],
            room_number="302",
            room_type="Suite",
            check_in=today + timedelta(days=7),
            check_out=today + timedelta(days=10),
            total_price=Decimal("660.00"),
            source="online",
        ),
        STAFF,
    )
    await booking_engine.create_booking(
        BookingRequest(
            guest=GUESTS[0],
            room_number="101",
            check_in=today + timedelta(days=14),
            check_out=today + timedelta(days=16),
            status="reserved",
            total_price=Decimal("160.00"),
        ),
        STAFF,
    )

    await outbox.drain()
    bookings = await booking_engine.get_all_bookings()
    tasks = await booking_engine.list_tasks()

    print(f"✅ Created {len(bookings)} bookings and {len(tasks)} housekeeping tasks")
    print()
    print("=" * 60)
    print("📊 Seed Summary")
    print("=" * 60)
    for booking in bookings:
        print(f"   🛏  Room {booking.room_number}: {booking.guest_name} {booking.check_in}..{booking.check_out} [{booking.status}]")
    print("=" * 60)
    print("🔑 Staff token for the API:")
    print(f"   {create_access_token(STAFF.id, STAFF.name)}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
