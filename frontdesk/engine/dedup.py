"""Canonical booking list.

Retries and double submissions can leave several bookings for the same guest,
room and dates. Readers see one survivor per group, the one furthest along
its lifecycle. Storage is never modified here.
"""

import logging
from collections.abc import Iterable
from datetime import date

from frontdesk.engine.conflicts import as_calendar_day, intervals_overlap
from frontdesk.engine.identity import normalize_email
from frontdesk.engine.ports import Store
from frontdesk.engine.records import (
    ACTIVE_STATUSES,
    CANCELLED,
    STATUS_RANK,
    BookingRecord,
    BookingView,
    GuestRecord,
    RoomRecord,
)

logger = logging.getLogger(__name__)

DedupKey = tuple[str, str, date, date]


def make_view(
    booking: BookingRecord,
    guest: GuestRecord | None,
    room: RoomRecord | None,
) -> BookingView:
    data = booking.model_dump()
    return BookingView(
        **data,
        guest_name=guest.name if guest else "Guest",
        guest_email=guest.email if guest else "",
        guest_phone=guest.phone if guest else "",
        room_number=room.room_number if room else "",
    )


async def load_booking_views(store: Store, bookings: list[BookingRecord] | None = None) -> list[BookingView]:
    """Join bookings (newest first unless given) with their guests and rooms."""
    if bookings is None:
        bookings = await store.bookings.list(order_by="-created_at")
    if not bookings:
        return []

    guests = await store.guests.list(where={"id": list({b.guest_id for b in bookings})})
    rooms = await store.rooms.list(where={"id": list({b.room_id for b in bookings})})
    guests_by_id = {g.id: g for g in guests}
    rooms_by_id = {r.id: r for r in rooms}
    return [make_view(b, guests_by_id.get(b.guest_id), rooms_by_id.get(b.room_id)) for b in bookings]


async def view_for(store: Store, booking: BookingRecord) -> BookingView:
    guest = await store.guests.get(booking.guest_id)
    room = await store.rooms.get(booking.room_id)
    return make_view(booking, guest, room)


def dedup_key(view: BookingView) -> DedupKey:
    return (
        normalize_email(view.guest_email),
        view.room_number,
        as_calendar_day(view.check_in),
        as_calendar_day(view.check_out),
    )


def pick_canonical(views: Iterable[BookingView]) -> list[BookingView]:
    """Keep the highest-ranked booking per dedup key, in first-seen order.

    Ties keep the booking seen first.
    """
    survivors: dict[DedupKey, BookingView] = {}
    dropped = 0
    for view in views:
        key = dedup_key(view)
        current = survivors.get(key)
        if current is None:
            survivors[key] = view
            continue
        dropped += 1
        if STATUS_RANK.get(view.status, 0) > STATUS_RANK.get(current.status, 0):
            survivors[key] = view
    if dropped:
        logger.debug("Collapsed %d duplicate bookings", dropped)
    return list(survivors.values())


async def list_canonical_bookings(store: Store) -> list[BookingView]:
    return pick_canonical(await load_booking_views(store))


async def find_duplicate_bookings(
    store: Store,
    email: str,
    room_number: str,
    check_in: date,
    check_out: date,
    include_cancelled: bool = False,
) -> list[BookingView]:
    """Bookings for the same normalized email, room number and dates."""
    email = normalize_email(email)
    if not email:
        return []

    guests = await store.guests.list(where={"email": email})
    if not guests:
        return []
    rooms = await store.rooms.list(where={"room_number": room_number}, limit=1)
    if not rooms:
        return []

    bookings = await store.bookings.list(
        where={
            "guest_id": [g.id for g in guests],
            "room_id": rooms[0].id,
            "check_in": as_calendar_day(check_in),
            "check_out": as_calendar_day(check_out),
        },
        order_by="created_at",
    )
    if not include_cancelled:
        bookings = [b for b in bookings if b.status != CANCELLED]
    guests_by_id = {g.id: g for g in guests}
    return [make_view(b, guests_by_id.get(b.guest_id), rooms[0]) for b in bookings]


def find_conflicted(views: list[BookingView]) -> list[BookingView]:
    """Active bookings that overlap another active booking on the same room.

    Each booking appears once, flagged ``conflict=True``.
    """
    by_room: dict[str, list[BookingView]] = {}
    for view in views:
        if view.status in ACTIVE_STATUSES:
            by_room.setdefault(str(view.room_id), []).append(view)

    flagged: dict = {}
    for bookings in by_room.values():
        for i, a in enumerate(bookings):
            for b in bookings[i + 1 :]:
                if intervals_overlap(
                    as_calendar_day(a.check_in),
                    as_calendar_day(a.check_out),
                    as_calendar_day(b.check_in),
                    as_calendar_day(b.check_out),
                ):
                    flagged.setdefault(a.id, a.model_copy(update={"conflict": True}))
                    flagged.setdefault(b.id, b.model_copy(update={"conflict": True}))
    return list(flagged.values())
