"""Room status synchronisation, mirrored onto the matching property record."""

import logging

from frontdesk.engine.ports import Store
from frontdesk.engine.records import (
    ROOM_AVAILABLE,
    ROOM_CLEANING,
    ROOM_MAINTENANCE,
    ROOM_OCCUPIED,
    RoomRecord,
)

logger = logging.getLogger(__name__)

ROOM_STATUSES = frozenset({ROOM_AVAILABLE, ROOM_OCCUPIED, ROOM_CLEANING, ROOM_MAINTENANCE})

# Room status -> property catalogue status
_PROPERTY_STATUS = {
    ROOM_AVAILABLE: "active",
    ROOM_OCCUPIED: "occupied",
    ROOM_CLEANING: "cleaning",
    ROOM_MAINTENANCE: "maintenance",
}


async def set_room_status(store: Store, room: RoomRecord, status: str) -> RoomRecord:
    """Set a room's status and keep its property record in step."""
    if status not in ROOM_STATUSES:
        raise ValueError(f"Unknown room status {status!r}")

    updated = room
    if room.status != status:
        updated = await store.rooms.update(room.id, {"status": status})
        logger.info("Room %s status %s -> %s", room.room_number, room.status, status)

    properties = await store.properties.list(where={"room_number": room.room_number}, limit=1)
    if properties and properties[0].status != _PROPERTY_STATUS[status]:
        await store.properties.update(properties[0].id, {"status": _PROPERTY_STATUS[status]})
    return updated


async def release_room_for_booking(store: Store, room: RoomRecord) -> RoomRecord:
    """Make a room bookable after a new reservation without downgrading it.

    Only ``cleaning`` and ``available`` rooms are reset; ``occupied`` and
    ``maintenance`` are left alone.
    """
    current = await store.rooms.get(room.id) or room
    if current.status not in (ROOM_AVAILABLE, ROOM_CLEANING):
        logger.info("Skipping room %s status reset, currently %s", current.room_number, current.status)
        return current
    return await set_room_status(store, current, ROOM_AVAILABLE)
