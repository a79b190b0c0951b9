"""Record shapes exchanged with the persistence port, plus engine request types.

Records are plain pydantic models so every store adapter (SQLAlchemy rows,
in-process dicts) can hand the engine the same objects.
"""

import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# ---------------------------------------------------------------------------
# Status vocabularies
# ---------------------------------------------------------------------------

RESERVED = "reserved"
CONFIRMED = "confirmed"
CHECKED_IN = "checked-in"
CHECKED_OUT = "checked-out"
CANCELLED = "cancelled"

BOOKING_STATUSES = frozenset({RESERVED, CONFIRMED, CHECKED_IN, CHECKED_OUT, CANCELLED})
ACTIVE_STATUSES = frozenset({RESERVED, CONFIRMED, CHECKED_IN})
INITIAL_STATUSES = frozenset({RESERVED, CONFIRMED})
TERMINAL_STATUSES = frozenset({CHECKED_OUT, CANCELLED})

# Survivor order when collapsing duplicate bookings
STATUS_RANK = {
    CHECKED_OUT: 5,
    CHECKED_IN: 4,
    CONFIRMED: 3,
    RESERVED: 2,
    CANCELLED: 1,
}

ROOM_AVAILABLE = "available"
ROOM_OCCUPIED = "occupied"
ROOM_CLEANING = "cleaning"
ROOM_MAINTENANCE = "maintenance"

TASK_PENDING = "pending"
TASK_COMPLETED = "completed"

BookingSource = Literal["online", "reception", "voice_agent"]
PaymentStatus = Literal["pending", "part", "full"]
PaymentMethod = Literal["cash", "mobile_money", "card", "not_paid"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Actor:
    """Who is performing an operation; stamped onto bookings and tasks."""

    id: str | None
    name: str


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


class ContactInfo(BaseModel):
    """Guest or billing contact details as supplied by callers."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""


class Charge(BaseModel):
    description: str
    amount: Decimal


class Discount(BaseModel):
    type: Literal["percentage", "fixed"]
    value: Decimal
    amount: Decimal


class GroupMetadata(BaseModel):
    """Group membership carried by a booking."""

    group_id: uuid.UUID
    group_reference: str
    is_primary: bool = False
    billing_contact: ContactInfo | None = None
    additional_charges: list[Charge] = Field(default_factory=list)
    discount: Discount | None = None

    def as_columns(self) -> dict:
        """Flatten into the booking's group columns (JSON-safe)."""
        return {
            "group_id": self.group_id,
            "group_reference": self.group_reference,
            "is_primary": self.is_primary,
            "billing_contact": self.billing_contact.model_dump(mode="json") if self.billing_contact else None,
            "additional_charges": [c.model_dump(mode="json") for c in self.additional_charges],
            "discount": self.discount.model_dump(mode="json") if self.discount else None,
        }


class Attachment(BaseModel):
    filename: str
    content: str  # base64
    content_type: str = "application/pdf"


class PaymentSummary(BaseModel):
    amount_paid: Decimal
    payment_status: str
    total_price: Decimal


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Record(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_at: datetime | None = None
    updated_at: datetime | None = None


class GuestRecord(Record):
    name: str
    email: str
    slug: str
    phone: str = ""
    address: str = ""
    is_placeholder: bool = False
    total_revenue: Decimal = Decimal("0")
    total_stays: int = 0
    last_booking_at: datetime | None = None
    last_room_number: str | None = None
    last_check_in: date | None = None
    last_check_out: date | None = None
    last_source: str | None = None
    last_created_by: str | None = None
    last_created_by_name: str | None = None
    last_check_in_by_name: str | None = None
    last_check_out_by_name: str | None = None
    last_stay_revenue: Decimal | None = None


class RoomTypeRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    base_price: Decimal = Decimal("0")


class RoomRecord(Record):
    room_number: str
    room_type_id: uuid.UUID | None = None
    status: str = ROOM_AVAILABLE
    price: Decimal = Decimal("0")


class PropertyRecord(Record):
    room_number: str
    name: str = ""
    property_type_id: uuid.UUID | None = None
    base_price: Decimal = Decimal("0")
    status: str = "active"


class BookingRecord(Record):
    guest_id: uuid.UUID
    room_id: uuid.UUID
    check_in: date
    check_out: date
    status: str = RESERVED
    total_price: Decimal = Decimal("0")
    num_guests: int = 1
    source: str = "reception"
    notes: str = ""

    created_by: str | None = None
    created_by_name: str | None = None
    check_in_by: str | None = None
    check_in_by_name: str | None = None
    actual_check_in: datetime | None = None
    check_out_by: str | None = None
    check_out_by_name: str | None = None
    actual_check_out: datetime | None = None

    group_id: uuid.UUID | None = None
    group_reference: str | None = None
    is_primary: bool = False
    billing_contact: dict | None = None
    additional_charges: list | None = None
    discount: dict | None = None

    amount_paid: Decimal = Decimal("0")
    payment_status: str = "pending"
    payment_method: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class HousekeepingTaskRecord(Record):
    room_id: uuid.UUID
    room_number: str
    booking_id: uuid.UUID | None = None
    status: str = TASK_PENDING
    notes: str = ""
    created_by: str | None = None
    completed_at: datetime | None = None


class BookingView(BookingRecord):
    """A booking joined with the guest and room details callers display."""

    guest_name: str = "Guest"
    guest_email: str = ""
    guest_phone: str = ""
    room_number: str = ""
    conflict: bool = False


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class BookingRequest(BaseModel):
    """Everything needed to place one booking by natural keys."""

    guest: ContactInfo
    room_number: str = Field(..., min_length=1, max_length=50)
    room_type: str | None = None
    check_in: date
    check_out: date
    num_guests: int = Field(1, ge=1)
    total_price: Decimal = Field(Decimal("0"), ge=0)
    status: str = CONFIRMED
    source: BookingSource = "reception"
    notes: str = ""
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    payment_status: PaymentStatus = "pending"
    payment_method: PaymentMethod | None = None
    additional_charges: list[Charge] = Field(default_factory=list)
    discount: Discount | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "BookingRequest":
        """Validate that check_out is strictly after check_in."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        return self
