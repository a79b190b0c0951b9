"""Collaborator interfaces the engine consumes.

The engine never talks to a database or a mail gateway directly: it is handed
a :class:`Store` (collections of records) and a :class:`NotificationPort`,
and optionally an :class:`InvoiceRenderer`.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import Any, Generic, Protocol, TypeVar

from frontdesk.engine.records import (
    Attachment,
    BookingRecord,
    GuestRecord,
    HousekeepingTaskRecord,
    PaymentSummary,
    PropertyRecord,
    RoomRecord,
    RoomTypeRecord,
)

RecordT = TypeVar("RecordT")


class ConstraintViolation(Exception):
    """A write was refused by a uniqueness or integrity constraint.

    During identity resolution this means "already exists, look it up again".
    """

    def __init__(self, collection: str, constraint: str | None, message: str = "") -> None:
        super().__init__(message or f"{collection}: constraint {constraint or 'unknown'} violated")
        self.collection = collection
        self.constraint = constraint


class OverlapViolation(ConstraintViolation):
    """The store refused a booking whose dates overlap an active booking on the same room."""


class RecordNotFound(LookupError):
    def __init__(self, collection: str, record_id: uuid.UUID) -> None:
        super().__init__(f"{collection}: no record with id {record_id}")
        self.collection = collection
        self.record_id = record_id


class Collection(Protocol, Generic[RecordT]):
    """One entity collection.

    ``where`` maps field names to a value (equality) or to a list, tuple or
    set (membership). ``order_by`` names a field, ``-`` prefix for descending.
    """

    async def list(
        self,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[RecordT]: ...

    async def get(self, record_id: uuid.UUID) -> RecordT | None: ...

    async def create(self, data: Mapping[str, Any]) -> RecordT: ...

    async def update(self, record_id: uuid.UUID, changes: Mapping[str, Any]) -> RecordT: ...

    async def delete(self, record_id: uuid.UUID) -> None: ...


class Store(Protocol):
    guests: Collection[GuestRecord]
    rooms: Collection[RoomRecord]
    bookings: Collection[BookingRecord]
    housekeeping_tasks: Collection[HousekeepingTaskRecord]
    properties: Collection[PropertyRecord]
    room_types: Collection[RoomTypeRecord]


class NotificationPort(Protocol):
    async def send_booking_confirmation(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        attachments: list[Attachment] | None = None,
        payment: PaymentSummary | None = None,
    ) -> None: ...

    async def send_check_in_notification(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
    ) -> None: ...

    async def send_check_out_notification(
        self,
        guest: GuestRecord,
        room: RoomRecord,
        booking: BookingRecord,
        attachments: list[Attachment] | None = None,
    ) -> None: ...


class InvoiceRenderer(Protocol):
    async def render_pre_invoice(
        self, booking: BookingRecord, guest: GuestRecord, room: RoomRecord
    ) -> Attachment: ...

    async def render_invoice(
        self, booking: BookingRecord, guest: GuestRecord, room: RoomRecord
    ) -> Attachment: ...
