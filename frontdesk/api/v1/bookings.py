"""Bookings API router.

Bookings are placed by natural keys (guest email, room number); the engine
resolves or creates the guest and room records. Reads return the canonical
list, one survivor per duplicated booking.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status

from frontdesk.api.deps import get_current_actor, get_engine
from frontdesk.engine.records import Actor, BookingView
from frontdesk.engine.service import BookingEngine
from frontdesk.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    ConflictResolveRequest,
    DeletionResponse,
    ExtendStayRequest,
    ExtendStayResponse,
)

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
)
async def create_booking(
    body: BookingCreate,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Create a booking, resolving the guest and room by natural keys.

    Fails with 409 when the room is taken for any of the nights or the same
    guest already holds this room for these dates.
    """
    return await engine.create_booking(body.to_request(), actor)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List canonical bookings",
)
async def list_bookings(
    status_filter: str | None = Query(None, alias="status", description="Filter by booking status"),
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict:
    if status_filter is not None:
        items = await engine.get_bookings_by_status(status_filter)
    else:
        items = await engine.get_all_bookings()
    return {"items": items, "total": len(items)}


@router.get(
    "/conflicts",
    response_model=BookingListResponse,
    summary="List bookings that overlap another active booking",
)
async def list_conflicts(
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict:
    items = await engine.get_conflicted_bookings()
    return {"items": items, "total": len(items)}


@router.post(
    "/conflicts/resolve",
    response_model=BookingResponse,
    summary="Resolve a conflict by cancelling one of the bookings",
)
async def resolve_conflict(
    body: ConflictResolveRequest,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Cancel ``cancel_id``; returns the cancelled booking."""
    return await engine.resolve_conflict(body.keep_id, body.cancel_id, actor)


@router.patch(
    "/{booking_id}/status",
    response_model=BookingResponse,
    summary="Move a booking through its lifecycle",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> BookingView:
    """Check in, check out, confirm, or cancel a booking.

    Room status, housekeeping tasks and guest history follow the transition.
    """
    return await engine.update_booking_status(booking_id, body.status, actor)


@router.post(
    "/{booking_id}/extend",
    response_model=ExtendStayResponse,
    summary="Extend a checked-in stay",
)
async def extend_stay(
    booking_id: uuid.UUID,
    body: ExtendStayRequest,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
):
    return await engine.extend_stay(
        booking_id,
        body.new_check_out,
        actor,
        new_room_number=body.new_room_number,
        discount_amount=body.discount_amount,
    )


@router.delete(
    "/{booking_id}",
    response_model=DeletionResponse,
    summary="Delete a booking",
)
async def delete_booking(
    booking_id: uuid.UUID,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
):
    """Delete a booking and its accidental duplicates. Checked-in bookings cannot be deleted."""
    return await engine.delete_booking(booking_id, actor)
