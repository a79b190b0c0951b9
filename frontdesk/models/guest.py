"""Guest domain model."""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from frontdesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Guest(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest identity, resolved by normalized email or slug.

    The ``last_*`` columns hold a snapshot of the guest's most recent stay so
    the history survives once the bookings themselves are deleted.
    """

    __tablename__ = "guests"

    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str] = mapped_column(String(50), default="")
    address: Mapped[str] = mapped_column(Text, default="")
    is_placeholder: Mapped[bool] = mapped_column(Boolean, default=False)

    total_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"))
    total_stays: Mapped[int] = mapped_column(Integer, default=0)

    last_booking_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_room_number: Mapped[str | None] = mapped_column(String(50))
    last_check_in: Mapped[date | None] = mapped_column(Date)
    last_check_out: Mapped[date | None] = mapped_column(Date)
    last_source: Mapped[str | None] = mapped_column(String(50))
    last_created_by: Mapped[str | None] = mapped_column(String(255))
    last_created_by_name: Mapped[str | None] = mapped_column(String(255))
    last_check_in_by_name: Mapped[str | None] = mapped_column(String(255))
    last_check_out_by_name: Mapped[str | None] = mapped_column(String(255))
    last_stay_revenue: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))

    __table_args__ = (
        UniqueConstraint("email", name="uq_guests_email"),
        UniqueConstraint("slug", name="uq_guests_slug"),
    )

    def __repr__(self) -> str:
        return f"<Guest(id={self.id}, email={self.email!r})>"
