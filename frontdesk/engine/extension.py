"""Extending a checked-in stay, optionally moving the guest to another room."""

import logging
import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from frontdesk.engine.conflicts import ConflictDetector
from frontdesk.engine.errors import AlreadyOccupied, InvalidDates, InvalidTransition, NotFound, RoomUnavailable
from frontdesk.engine.housekeeping import Housekeeping
from frontdesk.engine.ports import OverlapViolation, Store
from frontdesk.engine.records import (
    CHECKED_IN,
    ROOM_CLEANING,
    ROOM_MAINTENANCE,
    ROOM_OCCUPIED,
    Actor,
    BookingRecord,
    RoomRecord,
)
from frontdesk.engine.rooms import set_room_status

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ExtensionResult(BaseModel):
    booking: BookingRecord
    previous_check_out: date
    additional_nights: int
    nightly_rate: Decimal
    extension_cost: Decimal
    room_changed: bool = False
    previous_room_id: uuid.UUID | None = None


async def nightly_rate(store: Store, room: RoomRecord) -> Decimal:
    """Room type base price, else the room's own price, else the property's base price, else zero."""
    if room.room_type_id is not None:
        room_type = await store.room_types.get(room.room_type_id)
        if room_type is not None and room_type.base_price > 0:
            return room_type.base_price
    if room.price > 0:
        return room.price
    properties = await store.properties.list(where={"room_number": room.room_number}, limit=1)
    if properties and properties[0].base_price > 0:
        return properties[0].base_price
    logger.warning("No rate found for room %s, charging 0", room.room_number)
    return ZERO


class StayExtension:
    def __init__(
        self,
        store: Store,
        conflicts: ConflictDetector,
        housekeeping: Housekeeping,
    ) -> None:
        self._store = store
        self._conflicts = conflicts
        self._housekeeping = housekeeping

    async def _check_move_target(self, booking: BookingRecord, target: RoomRecord) -> None:
        if target.status == ROOM_MAINTENANCE:
            raise RoomUnavailable(f"Room {target.room_number} is under maintenance")

        occupants = await self._store.bookings.list(where={"room_id": target.id, "status": CHECKED_IN})
        occupants = [b for b in occupants if b.id != booking.id]
        if occupants:
            occupant = await self._store.guests.get(occupants[0].guest_id)
            name = occupant.name if occupant else "another guest"
            raise AlreadyOccupied(
                f"Cannot move: Room {target.room_number} is currently occupied by {name}. "
                "Check out the previous guest first."
            )

    async def extend_stay(
        self,
        booking_id: uuid.UUID,
        new_check_out: date,
        actor: Actor,
        new_room_number: str | None = None,
        discount_amount: Decimal | None = None,
    ) -> ExtensionResult:
        booking = await self._store.bookings.get(booking_id)
        if booking is None:
            raise NotFound(f"Booking not found: {booking_id}")
        if booking.status != CHECKED_IN:
            raise InvalidTransition("Can only extend checked-in bookings")
        if new_check_out <= booking.check_out:
            raise InvalidDates("New checkout must be after current checkout")

        current_room = await self._store.rooms.get(booking.room_id)
        if current_room is None:
            raise NotFound(f"Room not found for booking {booking.id}")

        target = current_room
        if new_room_number and new_room_number != current_room.room_number:
            found = await self._store.rooms.list(where={"room_number": new_room_number}, limit=1)
            if not found:
                raise NotFound(f"Room not found: {new_room_number}")
            target = found[0]
        moving = target.id != current_room.id
        if moving:
            await self._check_move_target(booking, target)

        conflicts = await self._conflicts.find_conflicts(
            target.id, booking.check_out, new_check_out, exclude_booking_id=booking.id
        )
        if conflicts:
            raise RoomUnavailable(
                f"Room {target.room_number} is not available for the extension period",
                conflicts,
            )

        nights = (new_check_out - booking.check_out).days
        rate = await nightly_rate(self._store, target)
        cost = rate * nights
        if discount_amount:
            cost = max(ZERO, cost - abs(discount_amount))

        changes = {"check_out": new_check_out, "total_price": booking.total_price + cost}
        if moving:
            changes["room_id"] = target.id
        try:
            updated = await self._store.bookings.update(booking.id, changes)
        except OverlapViolation as exc:
            raise RoomUnavailable(
                f"Room {target.room_number} is not available for the extension period"
            ) from exc

        if moving:
            await set_room_status(self._store, current_room, ROOM_CLEANING)
            guest = await self._store.guests.get(booking.guest_id)
            await self._housekeeping.create_checkout_task(
                updated, current_room, guest.name if guest else "Guest", actor
            )
            await set_room_status(self._store, target, ROOM_OCCUPIED)

        logger.info(
            "Booking %s extended %s -> %s (%d nights, %s) by %s%s",
            booking.id,
            booking.check_out,
            new_check_out,
            nights,
            cost,
            actor.name,
            f", moved {current_room.room_number} -> {target.room_number}" if moving else "",
        )
        return ExtensionResult(
            booking=updated,
            previous_check_out=booking.check_out,
            additional_nights=nights,
            nightly_rate=rate,
            extension_cost=cost,
            room_changed=moving,
            previous_room_id=current_room.id if moving else None,
        )
