# backend/simbay/schemas/booking.py
"""
Booking schemas for SimBay.

A booking is always a fixed-length window; clients send only the start
and the server computes the end.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import SIMULATORS
from .base import Money, StandardizedModel, StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    simulator: str = Field(..., description=f"One of {', '.join(SIMULATORS)}")
    start_time: datetime = Field(..., description="Hour-aligned start; naive values are UTC")
    target_user_id: Optional[str] = Field(
        None, description="Member to book for (admins only)"
    )


class BookingResponse(StrictModel):
    id: int
    user_id: str
    simulator: str
    start_time: datetime
    end_time: datetime
    created_at: datetime


class ScheduledBookingResponse(BookingResponse):
    """Schedule grid entry with the member's display name."""

    user_name: Optional[str] = None


class DisplayBookingResponse(StrictModel):
    id: int
    simulator: str
    start_time: datetime
    end_time: datetime
    member_name: str


class CancelBookingResponse(StandardizedModel):
    success: bool = True
    deleted_guest_fees: int = 0


class BookingReportRowResponse(StrictModel):
    id: int
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    simulator: str
    start_time: datetime
    end_time: datetime
    created_at: datetime
    guest_fee_total: Money
