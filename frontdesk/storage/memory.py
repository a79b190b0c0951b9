"""In-process store used by tests and local tooling.

Enforces the same uniqueness, foreign-key and booking-overlap constraints as
the PostgreSQL schema so engine behaviour does not depend on the adapter.
Every call yields to the event loop before touching data, which keeps
read-then-write races between concurrent callers observable.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from frontdesk.engine.conflicts import intervals_overlap
from frontdesk.engine.ports import ConstraintViolation, OverlapViolation, RecordNotFound
from frontdesk.engine.records import (
    ACTIVE_STATUSES,
    BookingRecord,
    GuestRecord,
    HousekeepingTaskRecord,
    PropertyRecord,
    RoomRecord,
    RoomTypeRecord,
    utcnow,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_MEMBERSHIP = (list, tuple, set, frozenset)


def _matches(row: Mapping[str, Any], where: Mapping[str, Any] | None) -> bool:
    if not where:
        return True
    for field, expected in where.items():
        value = row.get(field)
        if isinstance(expected, _MEMBERSHIP):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def _sort_key(field: str):
    def key(row: Mapping[str, Any]):
        value = row.get(field)
        return (value is not None, value)

    return key


class InMemoryCollection(Generic[RecordT]):
    def __init__(
        self,
        store: InMemoryStore,
        name: str,
        record_cls: type[RecordT],
        unique: Mapping[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._store = store
        self.name = name
        self._record_cls = record_cls
        self._unique = dict(unique or {})
        self.rows: dict[uuid.UUID, dict[str, Any]] = {}

    def _record(self, row: Mapping[str, Any]) -> RecordT:
        return self._record_cls.model_validate(dict(row))

    def _check_unique(self, row: Mapping[str, Any]) -> None:
        for constraint, fields in self._unique.items():
            values = tuple(row.get(f) for f in fields)
            if any(v is None for v in values):
                continue
            for other in self.rows.values():
                if other["id"] != row["id"] and tuple(other.get(f) for f in fields) == values:
                    raise ConstraintViolation(self.name, constraint)

    async def list(
        self,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[RecordT]:
        await asyncio.sleep(0)
        rows = [row for row in self.rows.values() if _matches(row, where)]
        if order_by:
            field = order_by.lstrip("-")
            rows.sort(key=_sort_key(field), reverse=order_by.startswith("-"))
        if limit is not None:
            rows = rows[:limit]
        return [self._record(row) for row in rows]

    async def get(self, record_id: uuid.UUID) -> RecordT | None:
        await asyncio.sleep(0)
        row = self.rows.get(record_id)
        return self._record(row) if row is not None else None

    async def create(self, data: Mapping[str, Any]) -> RecordT:
        await asyncio.sleep(0)
        async with self._store.lock:
            now = self._store.timestamp()
            row = {"id": uuid.uuid4(), "created_at": now, "updated_at": now, **data}
            row = self._record(row).model_dump()
            self._check_unique(row)
            self._store.check_references(self.name, row)
            self._store.check_overlap(self.name, row)
            self.rows[row["id"]] = row
            return self._record(row)

    async def update(self, record_id: uuid.UUID, changes: Mapping[str, Any]) -> RecordT:
        await asyncio.sleep(0)
        async with self._store.lock:
            current = self.rows.get(record_id)
            if current is None:
                raise RecordNotFound(self.name, record_id)
            row = {**current, **changes, "id": record_id, "updated_at": self._store.timestamp()}
            row = self._record(row).model_dump()
            self._check_unique(row)
            self._store.check_references(self.name, row)
            self._store.check_overlap(self.name, row)
            self.rows[record_id] = row
            return self._record(row)

    async def delete(self, record_id: uuid.UUID) -> None:
        await asyncio.sleep(0)
        async with self._store.lock:
            if record_id not in self.rows:
                raise RecordNotFound(self.name, record_id)
            self._store.check_restrict(self.name, record_id)
            del self.rows[record_id]


class InMemoryStore:
    """Dict-backed implementation of the ``Store`` port."""

    # child collection, column -> parent collection (ON DELETE RESTRICT)
    FOREIGN_KEYS = {
        ("bookings", "guest_id"): "guests",
        ("bookings", "room_id"): "rooms",
    }

    def __init__(self, clock: Callable[[], datetime] = utcnow) -> None:
        self.lock = asyncio.Lock()
        self._clock = clock
        self._last_timestamp: datetime | None = None

        self.guests: InMemoryCollection[GuestRecord] = InMemoryCollection(
            self, "guests", GuestRecord, {"uq_guests_email": ("email",), "uq_guests_slug": ("slug",)}
        )
        self.rooms: InMemoryCollection[RoomRecord] = InMemoryCollection(
            self, "rooms", RoomRecord, {"uq_rooms_room_number": ("room_number",)}
        )
        self.bookings: InMemoryCollection[BookingRecord] = InMemoryCollection(self, "bookings", BookingRecord)
        self.housekeeping_tasks: InMemoryCollection[HousekeepingTaskRecord] = InMemoryCollection(
            self, "housekeeping_tasks", HousekeepingTaskRecord
        )
        self.properties: InMemoryCollection[PropertyRecord] = InMemoryCollection(
            self, "properties", PropertyRecord
        )
        self.room_types: InMemoryCollection[RoomTypeRecord] = InMemoryCollection(
            self, "room_types", RoomTypeRecord, {"uq_room_types_name": ("name",)}
        )

    def collection(self, name: str) -> InMemoryCollection:
        return getattr(self, name)

    def timestamp(self) -> datetime:
        """Strictly increasing creation/update timestamps."""
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    def check_references(self, name: str, row: Mapping[str, Any]) -> None:
        for (child, column), parent in self.FOREIGN_KEYS.items():
            if child != name:
                continue
            value = row.get(column)
            if value is not None and value not in self.collection(parent).rows:
                raise ConstraintViolation(name, f"fk_{name}_{column}")

    def check_restrict(self, name: str, record_id: uuid.UUID) -> None:
        for (child, column), parent in self.FOREIGN_KEYS.items():
            if parent != name:
                continue
            if any(row.get(column) == record_id for row in self.collection(child).rows.values()):
                raise ConstraintViolation(child, f"fk_{child}_{column}")

    def check_overlap(self, name: str, row: Mapping[str, Any]) -> None:
        if name != "bookings" or row.get("status") not in ACTIVE_STATUSES:
            return
        for other in self.bookings.rows.values():
            if other["id"] == row["id"] or other["room_id"] != row["room_id"]:
                continue
            if other["status"] not in ACTIVE_STATUSES:
                continue
            if intervals_overlap(row["check_in"], row["check_out"], other["check_in"], other["check_out"]):
                logger.debug("Refusing booking %s: overlaps %s", row["id"], other["id"])
                raise OverlapViolation("bookings", "ex_bookings_room_dates")
