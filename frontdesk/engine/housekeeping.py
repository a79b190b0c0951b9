"""Housekeeping queue: cleaning tasks created by check-outs and room moves."""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from frontdesk.engine.errors import NotFound
from frontdesk.engine.ports import Store
from frontdesk.engine.records import (
    ROOM_AVAILABLE,
    ROOM_CLEANING,
    TASK_COMPLETED,
    TASK_PENDING,
    Actor,
    BookingRecord,
    HousekeepingTaskRecord,
    RoomRecord,
)
from frontdesk.engine.rooms import set_room_status

logger = logging.getLogger(__name__)


class Housekeeping:
    def __init__(self, store: Store, clock: Callable[[], datetime]) -> None:
        self._store = store
        self._clock = clock

    async def create_checkout_task(
        self,
        booking: BookingRecord,
        room: RoomRecord,
        guest_name: str,
        actor: Actor,
    ) -> HousekeepingTaskRecord:
        task = await self._store.housekeeping_tasks.create(
            {
                "room_id": room.id,
                "room_number": room.room_number,
                "booking_id": booking.id,
                "status": TASK_PENDING,
                "notes": f"Checkout cleaning for {guest_name}",
                "created_by": actor.id,
            }
        )
        logger.info("Queued cleaning task %s for room %s", task.id, room.room_number)
        return task

    async def list_tasks(self, status: str | None = None) -> list[HousekeepingTaskRecord]:
        where = {"status": status} if status else None
        return await self._store.housekeeping_tasks.list(where=where, order_by="created_at")

    async def complete_task(self, task_id: uuid.UUID, notes: str, actor: Actor) -> HousekeepingTaskRecord:
        """Close a task; a room still in ``cleaning`` becomes available again."""
        task = await self._store.housekeeping_tasks.get(task_id)
        if task is None:
            raise NotFound(f"Housekeeping task not found: {task_id}")

        changes = {"status": TASK_COMPLETED, "completed_at": self._clock()}
        if notes:
            changes["notes"] = notes
        task = await self._store.housekeeping_tasks.update(task_id, changes)

        room = await self._store.rooms.get(task.room_id)
        if room is None:
            logger.warning("Room %s for task %s no longer exists", task.room_number, task_id)
        elif room.status == ROOM_CLEANING:
            await set_room_status(self._store, room, ROOM_AVAILABLE)

        logger.info("Task %s completed by %s", task_id, actor.name)
        return task
