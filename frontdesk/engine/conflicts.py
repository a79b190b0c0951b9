"""Date-overlap detection over active bookings.

Intervals are half-open: ``[check_in, check_out)``. Comparison happens on
calendar days, never on timestamps, so timezone offsets cannot shift a stay
onto a neighbouring night.
"""

import logging
import uuid
from datetime import date, datetime

from pydantic import BaseModel

from frontdesk.engine.ports import Store
from frontdesk.engine.records import ACTIVE_STATUSES, ROOM_MAINTENANCE, BookingRecord, RoomRecord

logger = logging.getLogger(__name__)


class Conflict(BaseModel):
    """An active booking standing in the way of a requested stay."""

    booking_id: uuid.UUID
    guest_name: str
    check_in: date
    check_out: date
    status: str


def as_calendar_day(value: date | datetime | str) -> date:
    """Truncate a date, datetime, or ISO string to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0][:10])


def intervals_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a < end_b and start_b < end_a


class ConflictDetector:
    def __init__(self, store: Store) -> None:
        self._store = store

    async def _overlapping(
        self,
        room_id: uuid.UUID,
        check_in: date | datetime | str,
        check_out: date | datetime | str,
        exclude_booking_id: uuid.UUID | None,
    ) -> list[BookingRecord]:
        start = as_calendar_day(check_in)
        end = as_calendar_day(check_out)
        bookings = await self._store.bookings.list(where={"room_id": room_id})

        overlapping = []
        for booking in bookings:
            if not booking.is_active:
                continue
            if exclude_booking_id is not None and booking.id == exclude_booking_id:
                continue
            if intervals_overlap(start, end, as_calendar_day(booking.check_in), as_calendar_day(booking.check_out)):
                logger.debug("Booking %s overlaps %s..%s on room %s", booking.id, start, end, room_id)
                overlapping.append(booking)
        return overlapping

    async def has_overlap(
        self,
        room_id: uuid.UUID,
        check_in: date | datetime | str,
        check_out: date | datetime | str,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> bool:
        return bool(await self._overlapping(room_id, check_in, check_out, exclude_booking_id))

    async def find_conflicts(
        self,
        room_id: uuid.UUID,
        check_in: date | datetime | str,
        check_out: date | datetime | str,
        exclude_booking_id: uuid.UUID | None = None,
    ) -> list[Conflict]:
        """Return the overlapping active bookings with their guests' names."""
        overlapping = await self._overlapping(room_id, check_in, check_out, exclude_booking_id)
        if not overlapping:
            return []

        guests = await self._store.guests.list(where={"id": [b.guest_id for b in overlapping]})
        names = {g.id: g.name for g in guests}
        return [
            Conflict(
                booking_id=b.id,
                guest_name=names.get(b.guest_id, "Unknown Guest"),
                check_in=b.check_in,
                check_out=b.check_out,
                status=b.status,
            )
            for b in overlapping
        ]

    async def find_available_rooms(
        self,
        check_in: date | datetime | str,
        check_out: date | datetime | str,
    ) -> list[RoomRecord]:
        """Rooms with no active booking overlapping the range, excluding rooms under maintenance."""
        start = as_calendar_day(check_in)
        end = as_calendar_day(check_out)

        rooms = await self._store.rooms.list(order_by="room_number")
        bookings = await self._store.bookings.list(where={"status": list(ACTIVE_STATUSES)})
        taken = {
            b.room_id
            for b in bookings
            if intervals_overlap(start, end, as_calendar_day(b.check_in), as_calendar_day(b.check_out))
        }
        return [r for r in rooms if r.id not in taken and r.status != ROOM_MAINTENANCE]
