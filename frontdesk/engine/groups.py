"""Group bookings: several bookings sharing a billing contact and one primary.

The primary member alone carries the group's additional charges and
discount. Whenever the primary leaves, those move to a remaining member.
"""

import logging
import secrets
import string
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from frontdesk.engine.errors import (
    CannotDelete,
    GroupNotFound,
    LastGroupMember,
    NotFound,
    NotInGroup,
)
from frontdesk.engine.ports import Store
from frontdesk.engine.records import (
    CHECKED_IN,
    TERMINAL_STATUSES,
    Actor,
    BookingRecord,
    BookingRequest,
    Charge,
    ContactInfo,
    Discount,
    GroupMetadata,
    utcnow,
)

if TYPE_CHECKING:
    from frontdesk.engine.lifecycle import LifecycleStateMachine

logger = logging.getLogger(__name__)

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits


def make_group_reference(year: int) -> str:
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(4))
    return f"GRP-{year}-{suffix}"


class RemovalResult(BaseModel):
    remaining_count: int
    new_primary_id: uuid.UUID | None = None


async def hand_over_primary(store: Store, booking: BookingRecord) -> uuid.UUID | None:
    """Move the primary flag and billing adjustments from ``booking`` to another member.

    Members still in play are preferred over cancelled or checked-out ones.
    Returns the new primary's id, or None when ``booking`` is alone.
    """
    members = await store.bookings.list(where={"group_id": booking.group_id}, order_by="created_at")
    others = [m for m in members if m.id != booking.id]
    if not others:
        return None

    successor = sorted(others, key=lambda m: m.status in TERMINAL_STATUSES)[0]
    await store.bookings.update(
        successor.id,
        {
            "is_primary": True,
            "billing_contact": booking.billing_contact or successor.billing_contact,
            "additional_charges": booking.additional_charges or [],
            "discount": booking.discount,
        },
    )
    await store.bookings.update(
        booking.id,
        {"is_primary": False, "additional_charges": [], "discount": None},
    )
    logger.info("Group %s primary moved from %s to %s", booking.group_reference, booking.id, successor.id)
    return successor.id


class GroupAggregator:
    def __init__(
        self,
        store: Store,
        lifecycle: "LifecycleStateMachine",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle
        self._clock = clock

    async def _members(self, group_id: uuid.UUID) -> list[BookingRecord]:
        members = await self._store.bookings.list(where={"group_id": group_id}, order_by="created_at")
        if not members:
            raise GroupNotFound(f"Group not found: {group_id}")
        return members

    async def create_group(
        self,
        requests: Sequence[BookingRequest],
        billing_contact: ContactInfo,
        actor: Actor,
        charges: Sequence[Charge] | None = None,
        discount: Discount | None = None,
    ) -> list[BookingRecord]:
        """Create every member in order; the first becomes primary.

        Members are created one at a time. A failure propagates and leaves
        the members created so far in place.
        """
        if not requests:
            raise ValueError("A group booking needs at least one room")

        group_id = uuid.uuid4()
        reference = make_group_reference(self._clock().year)
        logger.info("Creating group %s with %d bookings", reference, len(requests))

        created = []
        for index, request in enumerate(requests):
            primary = index == 0
            group = GroupMetadata(
                group_id=group_id,
                group_reference=reference,
                is_primary=primary,
                billing_contact=billing_contact,
                additional_charges=list(charges or []) if primary else [],
                discount=discount if primary else None,
            )
            created.append(await self._lifecycle.create(request, actor, group=group))
        return created

    async def add_member(self, group_id: uuid.UUID, request: BookingRequest, actor: Actor) -> BookingRecord:
        members = await self._members(group_id)
        primary = next((m for m in members if m.is_primary), members[0])

        group = GroupMetadata(
            group_id=group_id,
            group_reference=primary.group_reference or "",
            is_primary=False,
            billing_contact=primary.billing_contact,
        )
        booking = await self._lifecycle.create(request, actor, group=group)
        logger.info("Added booking %s to group %s", booking.id, primary.group_reference)
        return booking

    async def remove_member(self, booking_id: uuid.UUID, actor: Actor) -> RemovalResult:
        booking = await self._store.bookings.get(booking_id)
        if booking is None:
            raise NotFound(f"Booking not found: {booking_id}")
        if booking.status == CHECKED_IN:
            raise CannotDelete("Cannot remove a checked-in booking from its group. Check the guest out first.")
        if booking.group_id is None:
            raise NotInGroup(f"Booking {booking_id} is not part of a group")

        members = await self._store.bookings.list(where={"group_id": booking.group_id})
        others = [m for m in members if m.id != booking.id]
        if not others:
            raise LastGroupMember("Cannot remove the last booking of a group. Delete the booking instead.")

        new_primary_id = None
        if booking.is_primary:
            new_primary_id = await hand_over_primary(self._store, booking)

        result = await self._lifecycle.delete_booking(booking.id, actor)
        remaining = len([m for m in others if m.id not in result.duplicates_removed])
        return RemovalResult(remaining_count=remaining, new_primary_id=new_primary_id)

    async def delete_group(self, group_id: uuid.UUID, actor: Actor) -> int:
        """Delete every member, primary last. Returns how many were deleted."""
        members = await self._members(group_id)
        occupied = [m for m in members if m.status == CHECKED_IN]
        if occupied:
            raise CannotDelete(
                f"Cannot delete group {members[0].group_reference}: "
                f"booking {occupied[0].id} is checked in"
            )

        ordered = sorted(members, key=lambda m: m.is_primary)
        member_ids = {m.id for m in members}
        deleted: set[uuid.UUID] = set()
        for member in ordered:
            if member.id in deleted:
                continue
            result = await self._lifecycle.delete_booking(member.id, actor)
            deleted.add(result.deleted_id)
            deleted.update(result.duplicates_removed)

        count = len(deleted & member_ids)
        logger.info("Deleted group %s (%d bookings)", members[0].group_reference, count)
        return count
