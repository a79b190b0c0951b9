"""Booking model: a guest's stay in a room, with group and payment columns."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    DDL,
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    event,
    func,
)
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from frontdesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin
from frontdesk.engine.records import ACTIVE_STATUSES


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A reservation linking a guest to a room for ``[check_in, check_out)``."""

    __tablename__ = "bookings"

    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("guests.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(50),
        default="reserved",
        index=True,
    )  # reserved, confirmed, checked-in, checked-out, cancelled
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    num_guests: Mapped[int] = mapped_column(Integer, default=1)
    source: Mapped[str] = mapped_column(String(50), default="reception")  # online, reception, voice_agent
    notes: Mapped[str] = mapped_column(Text, default="")

    # Actor stamps
    created_by: Mapped[str | None] = mapped_column(String(255))
    created_by_name: Mapped[str | None] = mapped_column(String(255))
    check_in_by: Mapped[str | None] = mapped_column(String(255))
    check_in_by_name: Mapped[str | None] = mapped_column(String(255))
    actual_check_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    check_out_by: Mapped[str | None] = mapped_column(String(255))
    check_out_by_name: Mapped[str | None] = mapped_column(String(255))
    actual_check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    # Group metadata
    group_id: Mapped[uuid.UUID | None] = mapped_column(index=True)
    group_reference: Mapped[str | None] = mapped_column(String(50))
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    billing_contact: Mapped[dict | None] = mapped_column(JSON)
    additional_charges: Mapped[list | None] = mapped_column(JSON)
    discount: Mapped[dict | None] = mapped_column(JSON)

    # Payment tracking
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")  # pending, part, full
    payment_method: Mapped[str | None] = mapped_column(String(20))  # cash, mobile_money, card, not_paid

    __table_args__ = (
        Index("ix_bookings_check_in", "check_in"),
        CheckConstraint("check_out > check_in", name="ck_bookings_dates"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, room_id={self.room_id}, guest_id={self.guest_id}, status={self.status})>"


# Final arbiter for the overlap invariant: no two active bookings on a room
# may share a night. Needs btree_gist for the uuid equality operator.
Booking.__table__.append_constraint(
    ExcludeConstraint(
        (Booking.__table__.c.room_id, "="),
        (func.daterange(Booking.__table__.c.check_in, Booking.__table__.c.check_out), "&&"),
        name="ex_bookings_room_dates",
        using="gist",
        where=Booking.__table__.c.status.in_(sorted(ACTIVE_STATUSES)),
    )
)

event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
