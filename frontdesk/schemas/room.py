"""Pydantic v2 schemas for room and housekeeping endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class RoomResponse(BaseModel):
    id: uuid.UUID
    room_number: str
    room_type_id: uuid.UUID | None = None
    status: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class HousekeepingTaskResponse(BaseModel):
    id: uuid.UUID
    room_id: uuid.UUID
    room_number: str
    booking_id: uuid.UUID | None = None
    status: str
    notes: str
    created_by: str | None = None
    created_at: datetime | None = None
    completed_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TaskComplete(BaseModel):
    notes: str = ""
