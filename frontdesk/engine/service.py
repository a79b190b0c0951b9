"""Booking engine facade: the operations the API and scripts call."""

import logging
import uuid
from collections.abc import Callable, Sequence
from datetime import date, datetime
from decimal import Decimal

from frontdesk.config import Settings
from frontdesk.engine.conflicts import ConflictDetector, as_calendar_day
from frontdesk.engine.dedup import find_conflicted, list_canonical_bookings, view_for
from frontdesk.engine.errors import InvalidDates, InvalidTransition, NotFound
from frontdesk.engine.extension import ExtensionResult, StayExtension
from frontdesk.engine.groups import GroupAggregator, RemovalResult
from frontdesk.engine.housekeeping import Housekeeping
from frontdesk.engine.identity import IdentityResolver
from frontdesk.engine.lifecycle import DeletionResult, LifecycleStateMachine
from frontdesk.engine.ports import InvoiceRenderer, Store
from frontdesk.engine.records import (
    BOOKING_STATUSES,
    CANCELLED,
    Actor,
    BookingRequest,
    BookingView,
    Charge,
    ContactInfo,
    Discount,
    HousekeepingTaskRecord,
    RoomRecord,
    utcnow,
)
from frontdesk.engine.reports import EndOfDayReport, end_of_day_report
from frontdesk.notifications.outbox import NotificationOutbox

logger = logging.getLogger(__name__)


class BookingEngine:
    """Wires the engine components over one store and one outbox."""

    def __init__(
        self,
        store: Store,
        settings: Settings,
        outbox: NotificationOutbox,
        invoices: InvoiceRenderer | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.outbox = outbox
        self.identity = IdentityResolver(store, settings)
        self.conflicts = ConflictDetector(store)
        self.housekeeping = Housekeeping(store, clock)
        self.lifecycle = LifecycleStateMachine(
            store,
            self.identity,
            self.conflicts,
            self.housekeeping,
            outbox,
            invoices=invoices,
            clock=clock,
        )
        self.groups = GroupAggregator(store, self.lifecycle, clock)
        self.extension = StayExtension(store, self.conflicts, self.housekeeping)

    # Bookings

    async def create_booking(self, request: BookingRequest, actor: Actor) -> BookingView:
        booking = await self.lifecycle.create(request, actor)
        return await view_for(self.store, booking)

    async def update_booking_status(self, booking_id: uuid.UUID, status: str, actor: Actor) -> BookingView:
        booking = await self.lifecycle.transition(booking_id, status, actor)
        return await view_for(self.store, booking)

    async def delete_booking(self, booking_id: uuid.UUID, actor: Actor) -> DeletionResult:
        return await self.lifecycle.delete_booking(booking_id, actor)

    async def get_all_bookings(self) -> list[BookingView]:
        return await list_canonical_bookings(self.store)

    async def get_bookings_by_status(self, status: str) -> list[BookingView]:
        if status not in BOOKING_STATUSES:
            raise InvalidTransition(f"Unknown booking status: {status}")
        return [b for b in await list_canonical_bookings(self.store) if b.status == status]

    async def get_conflicted_bookings(self) -> list[BookingView]:
        return find_conflicted(await list_canonical_bookings(self.store))

    async def resolve_conflict(self, keep_id: uuid.UUID, cancel_id: uuid.UUID, actor: Actor) -> BookingView:
        """Cancel ``cancel_id`` so that ``keep_id`` holds the room."""
        if keep_id == cancel_id:
            raise InvalidTransition("Cannot keep and cancel the same booking")
        for booking_id in (keep_id, cancel_id):
            if await self.store.bookings.get(booking_id) is None:
                raise NotFound(f"Booking not found: {booking_id}")

        logger.info("Resolving conflict: keeping %s, cancelling %s", keep_id, cancel_id)
        return await self.update_booking_status(cancel_id, CANCELLED, actor)

    async def extend_stay(
        self,
        booking_id: uuid.UUID,
        new_check_out: date,
        actor: Actor,
        new_room_number: str | None = None,
        discount_amount: Decimal | None = None,
    ) -> ExtensionResult:
        result = await self.extension.extend_stay(
            booking_id, new_check_out, actor, new_room_number=new_room_number, discount_amount=discount_amount
        )
        return result.model_copy(update={"booking": await view_for(self.store, result.booking)})

    # Groups

    async def create_group_booking(
        self,
        requests: Sequence[BookingRequest],
        billing_contact: ContactInfo,
        actor: Actor,
        charges: Sequence[Charge] | None = None,
        discount: Discount | None = None,
    ) -> list[BookingView]:
        created = await self.groups.create_group(requests, billing_contact, actor, charges, discount)
        return [await view_for(self.store, b) for b in created]

    async def add_to_group(self, group_id: uuid.UUID, request: BookingRequest, actor: Actor) -> BookingView:
        booking = await self.groups.add_member(group_id, request, actor)
        return await view_for(self.store, booking)

    async def remove_from_group(self, booking_id: uuid.UUID, actor: Actor) -> RemovalResult:
        return await self.groups.remove_member(booking_id, actor)

    async def delete_group(self, group_id: uuid.UUID, actor: Actor) -> int:
        return await self.groups.delete_group(group_id, actor)

    # Rooms and housekeeping

    async def find_available_rooms(self, check_in: date, check_out: date) -> list[RoomRecord]:
        if as_calendar_day(check_out) <= as_calendar_day(check_in):
            raise InvalidDates("check_out must be after check_in")
        return await self.conflicts.find_available_rooms(check_in, check_out)

    async def list_tasks(self, status: str | None = None) -> list[HousekeepingTaskRecord]:
        return await self.housekeeping.list_tasks(status)

    async def complete_task(self, task_id: uuid.UUID, notes: str, actor: Actor) -> HousekeepingTaskRecord:
        return await self.housekeeping.complete_task(task_id, notes, actor)

    # Reports

    async def get_end_of_day_report(self, day: date) -> EndOfDayReport:
        return await end_of_day_report(self.store, day)
