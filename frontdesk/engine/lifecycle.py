"""Booking lifecycle: creation, status transitions, deletion and their side effects.

Every mutation runs in a fixed order: validate, persist the booking, sync the
room, snapshot the guest, notify. Room and housekeeping writes propagate
errors; guest snapshots and notifications are best effort.
"""

import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from functools import partial

from pydantic import BaseModel, Field

from frontdesk.engine.conflicts import ConflictDetector
from frontdesk.engine.dedup import find_duplicate_bookings
from frontdesk.engine.errors import (
    AlreadyOccupied,
    CannotCheckOut,
    CannotDelete,
    DuplicateBooking,
    InvalidTransition,
    NotFound,
    RoomUnavailable,
)
from frontdesk.engine.groups import hand_over_primary
from frontdesk.engine.housekeeping import Housekeeping
from frontdesk.engine.identity import IdentityResolver, normalize_email
from frontdesk.engine.ports import InvoiceRenderer, OverlapViolation, Store
from frontdesk.engine.records import (
    BOOKING_STATUSES,
    CANCELLED,
    CHECKED_IN,
    CHECKED_OUT,
    CONFIRMED,
    INITIAL_STATUSES,
    RESERVED,
    ROOM_CLEANING,
    ROOM_OCCUPIED,
    Actor,
    Attachment,
    BookingRecord,
    BookingRequest,
    GroupMetadata,
    GuestRecord,
    PaymentSummary,
    RoomRecord,
    utcnow,
)
from frontdesk.engine.rooms import release_room_for_booking, set_room_status
from frontdesk.notifications.outbox import (
    BOOKING_CONFIRMATION,
    CHECK_IN,
    CHECK_OUT,
    NotificationOutbox,
    OutboundMessage,
)

logger = logging.getLogger(__name__)

TRANSITIONS: dict[str, frozenset[str]] = {
    RESERVED: frozenset({CONFIRMED, CHECKED_IN, CANCELLED}),
    CONFIRMED: frozenset({RESERVED, CHECKED_IN, CANCELLED}),
    CHECKED_IN: frozenset({CHECKED_OUT}),
    CHECKED_OUT: frozenset(),
    CANCELLED: frozenset(),
}


class DeletionResult(BaseModel):
    deleted_id: uuid.UUID
    duplicates_removed: list[uuid.UUID] = Field(default_factory=list)
    guest_deleted: bool = False
    new_primary_id: uuid.UUID | None = None


class LifecycleStateMachine:
    def __init__(
        self,
        store: Store,
        identity: IdentityResolver,
        conflicts: ConflictDetector,
        housekeeping: Housekeeping,
        outbox: NotificationOutbox,
        invoices: InvoiceRenderer | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._identity = identity
        self._conflicts = conflicts
        self._housekeeping = housekeeping
        self._outbox = outbox
        self._invoices = invoices
        self._clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(
        self,
        request: BookingRequest,
        actor: Actor,
        group: GroupMetadata | None = None,
    ) -> BookingRecord:
        """Place a booking by natural keys (guest email, room number).

        Group members take their charges and discount from ``group``; any set
        on ``request`` itself are ignored.
        """
        if request.status not in INITIAL_STATUSES:
            raise InvalidTransition(
                f"New bookings must start as reserved or confirmed, not {request.status}"
            )

        duplicates = await find_duplicate_bookings(
            self._store,
            request.guest.email,
            request.room_number,
            request.check_in,
            request.check_out,
        )
        if duplicates:
            raise DuplicateBooking(
                f"A booking for {normalize_email(request.guest.email)} in room {request.room_number} "
                f"from {request.check_in} to {request.check_out} already exists"
            )

        room = await self._identity.resolve_room(request.room_number, request.room_type)

        conflicts = await self._conflicts.find_conflicts(room.id, request.check_in, request.check_out)
        if conflicts:
            raise RoomUnavailable(
                f"Room {room.room_number} is not available for the selected dates",
                conflicts,
            )

        guest_id, guest_created = await self._identity.resolve_or_create_guest(request.guest)

        data = {
            "guest_id": guest_id,
            "room_id": room.id,
            "check_in": request.check_in,
            "check_out": request.check_out,
            "status": request.status,
            "total_price": request.total_price,
            "num_guests": request.num_guests,
            "source": request.source,
            "notes": request.notes,
            "created_by": actor.id,
            "created_by_name": actor.name,
            "amount_paid": request.amount_paid,
            "payment_status": request.payment_status,
            "payment_method": request.payment_method,
        }
        if group is not None:
            data.update(group.as_columns())
        else:
            data["additional_charges"] = [c.model_dump(mode="json") for c in request.additional_charges]
            data["discount"] = request.discount.model_dump(mode="json") if request.discount else None

        try:
            booking = await self._store.bookings.create(data)
        except OverlapViolation as exc:
            logger.warning("Store refused overlapping booking on room %s: %s", room.room_number, exc)
            if guest_created:
                await self._discard_unbooked_guest(guest_id)
            conflicts = await self._conflicts.find_conflicts(room.id, request.check_in, request.check_out)
            raise RoomUnavailable(
                f"Room {room.room_number} is not available for the selected dates",
                conflicts,
            ) from exc

        logger.info(
            "Booking %s created for room %s (%s..%s) by %s",
            booking.id,
            room.room_number,
            booking.check_in,
            booking.check_out,
            actor.name,
        )

        room = await release_room_for_booking(self._store, room)

        guest = await self._snapshot_new_booking(booking, room, actor)
        if guest is not None:
            payment = PaymentSummary(
                amount_paid=booking.amount_paid,
                payment_status=booking.payment_status,
                total_price=booking.total_price,
            )
            factory = None
            if self._invoices is not None:
                factory = partial(self._invoices.render_pre_invoice, booking, guest, room)
            self._notify(BOOKING_CONFIRMATION, guest, room, booking, payment=payment, attachment_factory=factory)
        return booking

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def _load(self, booking_id: uuid.UUID) -> BookingRecord:
        booking = await self._store.bookings.get(booking_id)
        if booking is None:
            raise NotFound(f"Booking not found: {booking_id}")
        return booking

    async def transition(self, booking_id: uuid.UUID, status: str, actor: Actor) -> BookingRecord:
        booking = await self._load(booking_id)

        if status not in BOOKING_STATUSES:
            raise InvalidTransition(f"Unknown booking status: {status}")
        if booking.status == status:
            return booking
        if status == CHECKED_OUT and booking.status != CHECKED_IN:
            raise CannotCheckOut(
                f"Cannot check out: booking is {booking.status}, only checked-in bookings can be checked out"
            )
        if status not in TRANSITIONS.get(booking.status, frozenset()):
            raise InvalidTransition(f"Cannot change booking status from {booking.status} to {status}")

        if status == CHECKED_IN:
            return await self._check_in(booking, actor)
        if status == CHECKED_OUT:
            return await self._check_out(booking, actor)

        updated = await self._store.bookings.update(booking.id, {"status": status})
        logger.info("Booking %s %s -> %s by %s", booking.id, booking.status, status, actor.name)
        return updated

    async def _check_in(self, booking: BookingRecord, actor: Actor) -> BookingRecord:
        room = await self._store.rooms.get(booking.room_id)
        if room is None:
            raise NotFound(f"Room not found for booking {booking.id}")

        occupants = await self._store.bookings.list(where={"room_id": room.id, "status": CHECKED_IN})
        occupants = [b for b in occupants if b.id != booking.id]
        if occupants:
            occupant = await self._store.guests.get(occupants[0].guest_id)
            name = occupant.name if occupant else "another guest"
            raise AlreadyOccupied(
                f"Cannot check in: Room {room.room_number} is currently occupied by {name}. "
                "Check out the previous guest first."
            )

        updated = await self._store.bookings.update(
            booking.id,
            {
                "status": CHECKED_IN,
                "check_in_by": actor.id,
                "check_in_by_name": actor.name,
                "actual_check_in": self._clock(),
            },
        )
        room = await set_room_status(self._store, room, ROOM_OCCUPIED)
        logger.info("Booking %s checked in to room %s by %s", booking.id, room.room_number, actor.name)

        guest = await self._store.guests.get(booking.guest_id)
        if guest is not None:
            self._notify(CHECK_IN, guest, room, updated)
        return updated

    async def _check_out(self, booking: BookingRecord, actor: Actor) -> BookingRecord:
        room = await self._store.rooms.get(booking.room_id)
        if room is None:
            raise NotFound(f"Room not found for booking {booking.id}")

        updated = await self._store.bookings.update(
            booking.id,
            {
                "status": CHECKED_OUT,
                "check_out_by": actor.id,
                "check_out_by_name": actor.name,
                "actual_check_out": self._clock(),
            },
        )
        room = await set_room_status(self._store, room, ROOM_CLEANING)

        guest = await self._store.guests.get(booking.guest_id)
        await self._housekeeping.create_checkout_task(updated, room, guest.name if guest else "Guest", actor)
        logger.info("Booking %s checked out of room %s by %s", booking.id, room.room_number, actor.name)

        guest = await self._snapshot_stay(updated, room) or guest
        if guest is not None:
            factory = None
            if self._invoices is not None:
                factory = partial(self._invoices.render_invoice, updated, guest, room)
            self._notify(CHECK_OUT, guest, room, updated, attachment_factory=factory)
        return updated

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    async def delete_booking(self, booking_id: uuid.UUID, actor: Actor) -> DeletionResult:
        booking = await self._load(booking_id)
        if booking.status == CHECKED_IN:
            raise CannotDelete("Cannot delete a checked-in booking. Check the guest out first.")

        new_primary_id = None
        if booking.group_id is not None and booking.is_primary:
            new_primary_id = await hand_over_primary(self._store, booking)

        guest = await self._store.guests.get(booking.guest_id)
        await self._store.bookings.delete(booking.id)
        logger.info("Booking %s deleted by %s", booking.id, actor.name)

        removed = await self._delete_duplicates(booking, guest)

        guest_deleted = False
        if guest is not None:
            if booking.status == CHECKED_OUT:
                room = await self._store.rooms.get(booking.room_id)
                if room is not None:
                    await self._snapshot_stay(booking, room)
            else:
                remaining = await self._store.bookings.list(where={"guest_id": guest.id}, limit=1)
                if not remaining:
                    try:
                        await self._store.guests.delete(guest.id)
                        guest_deleted = True
                        logger.info("Deleted guest %s with no remaining bookings", guest.id)
                    except Exception as exc:
                        logger.warning("Could not delete orphaned guest %s: %s", guest.id, exc)

        return DeletionResult(
            deleted_id=booking.id,
            duplicates_removed=removed,
            guest_deleted=guest_deleted,
            new_primary_id=new_primary_id,
        )

    async def _delete_duplicates(self, booking: BookingRecord, guest: GuestRecord | None) -> list[uuid.UUID]:
        """Remove bookings on the same room and dates for the same guest or email."""
        candidates = await self._store.bookings.list(
            where={
                "room_id": booking.room_id,
                "check_in": booking.check_in,
                "check_out": booking.check_out,
            }
        )
        candidates = [c for c in candidates if c.id != booking.id]
        if not candidates:
            return []

        email = normalize_email(guest.email) if guest else ""
        other_ids = {c.guest_id for c in candidates if c.guest_id != booking.guest_id}
        emails = {}
        if email and other_ids:
            others = await self._store.guests.list(where={"id": list(other_ids)})
            emails = {g.id: normalize_email(g.email) for g in others}

        removed = []
        for candidate in candidates:
            same_guest = candidate.guest_id == booking.guest_id
            same_email = bool(email) and emails.get(candidate.guest_id) == email
            if not (same_guest or same_email):
                continue
            if candidate.status == CHECKED_IN:
                logger.warning("Keeping checked-in duplicate booking %s", candidate.id)
                continue
            try:
                if candidate.group_id is not None and candidate.is_primary:
                    await hand_over_primary(self._store, candidate)
                await self._store.bookings.delete(candidate.id)
            except Exception:
                logger.exception("Failed to delete duplicate booking %s", candidate.id)
                continue
            removed.append(candidate.id)

        if removed:
            logger.info("Removed %d duplicate bookings of %s", len(removed), booking.id)
        return removed

    # ------------------------------------------------------------------
    # Best-effort side effects
    # ------------------------------------------------------------------

    async def _discard_unbooked_guest(self, guest_id: uuid.UUID) -> None:
        """Drop a guest created for a booking the store then refused."""
        try:
            if await self._store.bookings.list(where={"guest_id": guest_id}, limit=1):
                return
            await self._store.guests.delete(guest_id)
            logger.info("Deleted guest %s created for a refused booking", guest_id)
        except Exception as exc:
            logger.warning("Could not delete guest %s after refused booking: %s", guest_id, exc)

    async def _snapshot_new_booking(
        self, booking: BookingRecord, room: RoomRecord, actor: Actor
    ) -> GuestRecord | None:
        guest = await self._store.guests.get(booking.guest_id)
        if guest is None:
            logger.warning("Guest %s vanished before snapshot of booking %s", booking.guest_id, booking.id)
            return None
        try:
            return await self._store.guests.update(
                guest.id,
                {
                    "last_booking_at": self._clock(),
                    "last_room_number": room.room_number,
                    "last_check_in": booking.check_in,
                    "last_check_out": booking.check_out,
                    "last_source": booking.source,
                    "last_created_by": actor.id,
                    "last_created_by_name": actor.name,
                    "total_revenue": guest.total_revenue + booking.total_price,
                    "total_stays": guest.total_stays + 1,
                },
            )
        except Exception:
            logger.exception("Guest snapshot failed for booking %s", booking.id)
            return guest

    async def _snapshot_stay(self, booking: BookingRecord, room: RoomRecord) -> GuestRecord | None:
        """Record the finished stay on the guest. Totals were counted at creation."""
        try:
            return await self._store.guests.update(
                booking.guest_id,
                {
                    "last_room_number": room.room_number,
                    "last_check_in": booking.check_in,
                    "last_check_out": booking.check_out,
                    "last_source": booking.source,
                    "last_created_by": booking.created_by,
                    "last_created_by_name": booking.created_by_name,
                    "last_check_in_by_name": booking.check_in_by_name,
                    "last_check_out_by_name": booking.check_out_by_name,
                    "last_stay_revenue": booking.total_price,
                },
            )
        except Exception:
            logger.exception("Guest history snapshot failed for booking %s", booking.id)
            return None

    def _notify(
        self,
        kind: str,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        payment: PaymentSummary | None = None,
        attachment_factory: Callable[[], Awaitable[Attachment]] | None = None,
    ) -> None:
        try:
            self._outbox.enqueue(
                OutboundMessage(
                    kind=kind,
                    guest=guest,
                    room=room,
                    booking=booking,
                    payment=payment,
                    attachment_factory=attachment_factory,
                )
            )
        except Exception:
            logger.exception("Could not queue %s notification for booking %s", kind, booking.id)
