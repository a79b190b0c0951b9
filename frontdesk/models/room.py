"""Room inventory models: room types, rooms, and external property records."""

import uuid
from decimal import Decimal

from sqlalchemy import ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from frontdesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class RoomType(UUIDPrimaryKeyMixin, Base):
    """A room category with its nightly base price."""

    __tablename__ = "room_types"

    name: Mapped[str] = mapped_column(String(255), unique=True)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    def __repr__(self) -> str:
        return f"<RoomType(id={self.id}, name={self.name!r})>"


class Room(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable room, addressed by callers through its room number."""

    __tablename__ = "rooms"

    room_number: Mapped[str] = mapped_column(String(50))
    room_type_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("room_types.id", ondelete="SET NULL"),
        index=True,
    )
    status: Mapped[str] = mapped_column(String(50), default="available")  # available, occupied, cleaning, maintenance
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    __table_args__ = (UniqueConstraint("room_number", name="uq_rooms_room_number"),)

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, room_number={self.room_number!r}, status={self.status!r})>"


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Inventory record from the property catalogue, keyed by room number.

    Rooms missing from ``rooms`` are synthesized from these records.
    """

    __tablename__ = "properties"

    room_number: Mapped[str] = mapped_column(String(50), index=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    property_type_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("room_types.id", ondelete="SET NULL"),
    )
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(50), default="active")  # active, occupied, cleaning, maintenance

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, room_number={self.room_number!r})>"
