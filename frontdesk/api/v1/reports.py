"""Reports API router."""

from datetime import date

from fastapi import APIRouter, Depends, Query

from frontdesk.api.deps import get_current_actor, get_engine
from frontdesk.engine.records import Actor, utcnow
from frontdesk.engine.reports import EndOfDayReport
from frontdesk.engine.service import BookingEngine
from frontdesk.schemas.report import EndOfDayReportResponse

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


@router.get(
    "/end-of-day",
    response_model=EndOfDayReportResponse,
    summary="End-of-day booking and payment summary",
)
async def end_of_day(
    day: date | None = Query(None, description="Defaults to today (UTC)"),
    engine: BookingEngine = Depends(get_engine),
    actor: Actor = Depends(get_current_actor),
) -> EndOfDayReport:
    return await engine.get_end_of_day_report(day or utcnow().date())
