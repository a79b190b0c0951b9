"""Group bookings API router."""

import uuid

from fastapi import APIRouter, Depends, status

from frontdesk.api.deps import get_current_actor, get_engine
from frontdesk.engine.records import Actor, BookingView
from frontdesk.engine.service import BookingEngine
from frontdesk.schemas.booking import BookingCreate, BookingResponse
from frontdesk.schemas.group import GroupCreate, GroupDeleteResponse, GroupResponse, RemovalResponse

router = APIRouter(prefix="/api/v1/groups", tags=["groups"])


@router.post(
    "",
    response_model=GroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book several rooms as one group",
)
async def create_group(
    body: GroupCreate,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict:
    """Create every booking of the group in order.

    Bookings are created one at a time; when one fails, the ones already
    created are kept and the error is returned.
    """
    bookings = await engine.create_group_booking(
        [b.to_request() for b in body.bookings],
        body.billing_contact,
        actor,
        charges=body.additional_charges,
        discount=body.discount,
    )
    return {
        "group_id": bookings[0].group_id,
        "group_reference": bookings[0].group_reference,
        "bookings": bookings,
    }


@router.post(
    "/{group_id}/members",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a booking to an existing group",
)
async def add_member(
    group_id: uuid.UUID,
    body: BookingCreate,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> BookingView:
    return await engine.add_to_group(group_id, body.to_request(), actor)


@router.delete(
    "/members/{booking_id}",
    response_model=RemovalResponse,
    summary="Remove a booking from its group",
)
async def remove_member(
    booking_id: uuid.UUID,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
):
    """Delete the booking; a removed primary hands its billing to another member."""
    return await engine.remove_from_group(booking_id, actor)


@router.delete(
    "/{group_id}",
    response_model=GroupDeleteResponse,
    summary="Delete a whole group",
)
async def delete_group(
    group_id: uuid.UUID,
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> dict:
    deleted = await engine.delete_group(group_id, actor)
    return {"group_id": group_id, "deleted": deleted}
