"""End-of-day figures for the front desk."""

import logging
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from frontdesk.engine.conflicts import as_calendar_day
from frontdesk.engine.dedup import find_conflicted, list_canonical_bookings
from frontdesk.engine.ports import Store
from frontdesk.engine.records import CANCELLED, CHECKED_IN, CONFIRMED

logger = logging.getLogger(__name__)

REPORTED_METHODS = ("cash", "mobile_money", "card")


class PaymentBreakdown(BaseModel):
    cash: Decimal = Decimal("0")
    mobile_money: Decimal = Decimal("0")
    card: Decimal = Decimal("0")


class EndOfDayReport(BaseModel):
    day: date
    total_bookings: int = 0
    confirmed_bookings: int = 0
    cancelled_bookings: int = 0
    revenue: Decimal = Decimal("0")
    conflicts: int = 0
    payments: PaymentBreakdown = Field(default_factory=PaymentBreakdown)


async def end_of_day_report(store: Store, day: date) -> EndOfDayReport:
    """Summarise the bookings created on ``day``.

    Confirmed counts both confirmed and checked-in bookings, and revenue is
    summed over those. The conflict count covers every current booking, not
    just the day's.
    """
    bookings = await list_canonical_bookings(store)
    todays = [b for b in bookings if b.created_at is not None and as_calendar_day(b.created_at) == day]

    report = EndOfDayReport(day=day, total_bookings=len(todays))
    for booking in todays:
        if booking.status in (CONFIRMED, CHECKED_IN):
            report.confirmed_bookings += 1
            report.revenue += booking.total_price
        elif booking.status == CANCELLED:
            report.cancelled_bookings += 1

        if booking.payment_method in REPORTED_METHODS:
            current = getattr(report.payments, booking.payment_method)
            setattr(report.payments, booking.payment_method, current + booking.amount_paid)

    report.conflicts = len(find_conflicted(bookings))
    logger.info(
        "End-of-day %s: %d bookings, %d confirmed, revenue %s",
        day,
        report.total_bookings,
        report.confirmed_bookings,
        report.revenue,
    )
    return report
