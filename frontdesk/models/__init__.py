"""SQLAlchemy models for Frontdesk.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from frontdesk.models.booking import Booking
from frontdesk.models.guest import Guest
from frontdesk.models.housekeeping import HousekeepingTask
from frontdesk.models.room import Property, Room, RoomType

__all__ = [
    "Booking",
    "Guest",
    "HousekeepingTask",
    "Property",
    "Room",
    "RoomType",
]
