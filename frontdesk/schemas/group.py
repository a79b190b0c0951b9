"""Pydantic v2 schemas for group booking endpoints."""

import uuid

from pydantic import BaseModel, ConfigDict, Field

from frontdesk.engine.records import Charge, ContactInfo, Discount
from frontdesk.schemas.booking import BookingCreate, BookingResponse


class GroupCreate(BaseModel):
    """Several rooms booked together under one billing contact.

    The first booking becomes the group's primary and carries the charges and
    discount.
    """

    billing_contact: ContactInfo
    bookings: list[BookingCreate] = Field(..., min_length=1)
    additional_charges: list[Charge] = Field(default_factory=list)
    discount: Discount | None = None


class GroupResponse(BaseModel):
    group_id: uuid.UUID
    group_reference: str
    bookings: list[BookingResponse]


class RemovalResponse(BaseModel):
    remaining_count: int
    new_primary_id: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)


class GroupDeleteResponse(BaseModel):
    group_id: uuid.UUID
    deleted: int
