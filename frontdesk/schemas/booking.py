"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from frontdesk.engine.records import (
    BookingRequest,
    BookingSource,
    Charge,
    ContactInfo,
    Discount,
    PaymentMethod,
    PaymentStatus,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for placing a booking by guest details and room number."""

    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: EmailStr | None = None
    guest_phone: str = Field("", max_length=50)
    guest_address: str = ""
    room_number: str = Field(..., min_length=1, max_length=50)
    room_type: str | None = Field(None, max_length=255)
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    status: str = "confirmed"
    total_price: Decimal = Field(Decimal("0"), ge=0)
    source: BookingSource = "reception"
    notes: str = ""
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    payment_status: PaymentStatus = "pending"
    payment_method: PaymentMethod | None = None
    additional_charges: list[Charge] = Field(default_factory=list)
    discount: Discount | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingCreate":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self

    def to_request(self) -> BookingRequest:
        return BookingRequest(
            guest=ContactInfo(
                full_name=self.guest_name,
                email=self.guest_email or "",
                phone=self.guest_phone,
                address=self.guest_address,
            ),
            **self.model_dump(
                exclude={"guest_name", "guest_email", "guest_phone", "guest_address"},
            ),
        )


class BookingStatusUpdate(BaseModel):
    status: str = Field(..., description="reserved, confirmed, checked-in, checked-out or cancelled")


class ExtendStayRequest(BaseModel):
    new_check_out: date
    new_room_number: str | None = Field(None, max_length=50)
    discount_amount: Decimal | None = Field(None, ge=0)


class ConflictResolveRequest(BaseModel):
    keep_id: uuid.UUID
    cancel_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """A booking with the guest and room details shown at the desk."""

    id: uuid.UUID
    guest_id: uuid.UUID
    room_id: uuid.UUID
    guest_name: str
    guest_email: str
    guest_phone: str
    room_number: str
    check_in: date
    check_out: date
    status: str
    total_price: Decimal
    num_guests: int
    source: str
    notes: str

    created_by_name: str | None = None
    check_in_by_name: str | None = None
    actual_check_in: datetime | None = None
    check_out_by_name: str | None = None
    actual_check_out: datetime | None = None

    group_id: uuid.UUID | None = None
    group_reference: str | None = None
    is_primary: bool = False
    billing_contact: dict | None = None
    additional_charges: list | None = None
    discount: dict | None = None

    amount_paid: Decimal
    payment_status: str
    payment_method: str | None = None

    conflict: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    items: list[BookingResponse]
    total: int


class ExtendStayResponse(BaseModel):
    booking: BookingResponse
    previous_check_out: date
    additional_nights: int
    nightly_rate: Decimal
    extension_cost: Decimal
    room_changed: bool


class DeletionResponse(BaseModel):
    deleted_id: uuid.UUID
    duplicates_removed: list[uuid.UUID]
    guest_deleted: bool
    new_primary_id: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)
