"""Room availability and housekeeping API routers."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query

from frontdesk.api.deps import get_current_actor, get_engine
from frontdesk.engine.records import Actor, HousekeepingTaskRecord, RoomRecord
from frontdesk.engine.service import BookingEngine
from frontdesk.schemas.room import HousekeepingTaskResponse, RoomResponse, TaskComplete

router = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])
housekeeping_router = APIRouter(prefix="/api/v1/housekeeping", tags=["housekeeping"])


@router.get(
    "/available",
    response_model=list[RoomResponse],
    summary="Rooms free for a date range",
)
async def available_rooms(
    check_in: date = Query(..., description="First night"),
    check_out: date = Query(..., description="Departure day (not a night)"),
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> list[RoomRecord]:
    """Rooms with no active booking in ``[check_in, check_out)``, excluding rooms under maintenance."""
    return await engine.find_available_rooms(check_in, check_out)


@housekeeping_router.get(
    "/tasks",
    response_model=list[HousekeepingTaskResponse],
    summary="List housekeeping tasks",
)
async def list_tasks(
    status_filter: str | None = Query(None, alias="status", description="pending or completed"),
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> list[HousekeepingTaskRecord]:
    return await engine.list_tasks(status_filter)


@housekeeping_router.post(
    "/tasks/{task_id}/complete",
    response_model=HousekeepingTaskResponse,
    summary="Mark a cleaning task done",
)
async def complete_task(
    task_id: uuid.UUID,
    body: TaskComplete,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> HousekeepingTaskRecord:
    """Complete the task; a room still in cleaning becomes available again."""
    return await engine.complete_task(task_id, body.notes, actor)
