"""PostgreSQL store built on the async SQLAlchemy models.

Each port call opens its own session from the factory and commits before
returning, so a caller never holds a transaction across engine steps.
"""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from frontdesk.database import Base
from frontdesk.engine.ports import ConstraintViolation, OverlapViolation, RecordNotFound
from frontdesk.engine.records import (
    BookingRecord,
    GuestRecord,
    HousekeepingTaskRecord,
    PropertyRecord,
    RoomRecord,
    RoomTypeRecord,
)
from frontdesk.models import Booking, Guest, HousekeepingTask, Property, Room, RoomType

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

OVERLAP_CONSTRAINT = "ex_bookings_room_dates"
EXCLUSION_VIOLATION = "23P01"

_CONSTRAINT_IN_MESSAGE = re.compile(r'constraint "([^"]+)"')
_MEMBERSHIP = (list, tuple, set, frozenset)


def translate_integrity_error(collection: str, exc: IntegrityError) -> ConstraintViolation:
    """Map a driver integrity error onto the port's constraint errors."""
    orig = exc.orig
    cause = getattr(orig, "__cause__", None)
    constraint = getattr(cause, "constraint_name", None) or getattr(orig, "constraint_name", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(cause, "sqlstate", None)
    message = str(orig)
    if constraint is None:
        match = _CONSTRAINT_IN_MESSAGE.search(message)
        if match:
            constraint = match.group(1)

    if sqlstate == EXCLUSION_VIOLATION or constraint == OVERLAP_CONSTRAINT:
        return OverlapViolation(collection, constraint or OVERLAP_CONSTRAINT, message)
    return ConstraintViolation(collection, constraint, message)


class SqlAlchemyCollection(Generic[RecordT]):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        name: str,
        model: type[Base],
        record_cls: type[RecordT],
    ) -> None:
        self._session_factory = session_factory
        self.name = name
        self._model = model
        self._record_cls = record_cls

    def _column(self, field: str):
        column = getattr(self._model, field, None)
        if column is None:
            raise ValueError(f"{self.name} has no field {field!r}")
        return column

    async def list(
        self,
        where: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[RecordT]:
        query = select(self._model)
        for field, value in (where or {}).items():
            column = self._column(field)
            if isinstance(value, _MEMBERSHIP):
                query = query.where(column.in_(list(value)))
            elif value is None:
                query = query.where(column.is_(None))
            else:
                query = query.where(column == value)

        if order_by:
            column = self._column(order_by.lstrip("-"))
            query = query.order_by(column.desc() if order_by.startswith("-") else column.asc())
        if limit is not None:
            query = query.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._record_cls.model_validate(row) for row in result.scalars().all()]

    async def get(self, record_id: uuid.UUID) -> RecordT | None:
        async with self._session_factory() as session:
            row = await session.get(self._model, record_id)
            return self._record_cls.model_validate(row) if row is not None else None

    async def _commit(self, session: AsyncSession) -> None:
        try:
            await session.commit()
        except IntegrityError as exc:
            await session.rollback()
            violation = translate_integrity_error(self.name, exc)
            logger.info("%s write refused by %s", self.name, violation.constraint)
            raise violation from exc

    async def create(self, data: Mapping[str, Any]) -> RecordT:
        async with self._session_factory() as session:
            row = self._model(**data)
            session.add(row)
            await self._commit(session)
            await session.refresh(row)
            return self._record_cls.model_validate(row)

    async def update(self, record_id: uuid.UUID, changes: Mapping[str, Any]) -> RecordT:
        async with self._session_factory() as session:
            row = await session.get(self._model, record_id)
            if row is None:
                raise RecordNotFound(self.name, record_id)
            for field, value in changes.items():
                self._column(field)
                setattr(row, field, value)
            await self._commit(session)
            await session.refresh(row)
            return self._record_cls.model_validate(row)

    async def delete(self, record_id: uuid.UUID) -> None:
        async with self._session_factory() as session:
            row = await session.get(self._model, record_id)
            if row is None:
                raise RecordNotFound(self.name, record_id)
            await session.delete(row)
            await self._commit(session)


class SqlAlchemyStore:
    """``Store`` port over the async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.guests = SqlAlchemyCollection(session_factory, "guests", Guest, GuestRecord)
        self.rooms = SqlAlchemyCollection(session_factory, "rooms", Room, RoomRecord)
        self.bookings = SqlAlchemyCollection(session_factory, "bookings", Booking, BookingRecord)
        self.housekeeping_tasks = SqlAlchemyCollection(
            session_factory, "housekeeping_tasks", HousekeepingTask, HousekeepingTaskRecord
        )
        self.properties = SqlAlchemyCollection(session_factory, "properties", Property, PropertyRecord)
        self.room_types = SqlAlchemyCollection(session_factory, "room_types", RoomType, RoomTypeRecord)
