"""Pydantic v2 schemas for report endpoints."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class PaymentBreakdownResponse(BaseModel):
    cash: Decimal
    mobile_money: Decimal
    card: Decimal

    model_config = ConfigDict(from_attributes=True)


class EndOfDayReportResponse(BaseModel):
    """Bookings created on ``day`` and the money taken for them."""

    day: date
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    revenue: Decimal
    conflicts: int
    payments: PaymentBreakdownResponse

    model_config = ConfigDict(from_attributes=True)
