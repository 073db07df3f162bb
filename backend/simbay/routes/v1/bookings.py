# backend/simbay/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET /                  → Bookings for a facility-local day (schedule grid)
    GET /mine              → Current member's bookings
    GET /display           → Public display board (no contact details)
    GET /report            → Admin bookings report with guest-fee totals
    POST /                 → Create a booking
    DELETE /{booking_id}   → Cancel a booking and its guest fees
"""

import asyncio
from datetime import date
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, Query, status

from ...api.dependencies import get_booking_service, get_current_actor, get_notification_service
from ...core.exceptions import DomainException
from ...models.booking import Booking
from ...principal import Actor
from ...schemas.booking import (
    BookingCreate,
    BookingReportRowResponse,
    BookingResponse,
    CancelBookingResponse,
    DisplayBookingResponse,
    ScheduledBookingResponse,
)
from ...services.booking_service import BookingService
from ...services.notification_service import BookingConfirmation, NotificationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _scheduled(booking: Booking) -> ScheduledBookingResponse:
    return ScheduledBookingResponse(
        id=booking.id,
        user_id=booking.user_id,
        simulator=booking.simulator,
        start_time=booking.start_time,
        end_time=booking.end_time,
        created_at=booking.created_at,
        user_name=booking.user.name if booking.user else None,
    )


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get("", response_model=List[ScheduledBookingResponse])
async def list_bookings_for_day(
    day: date = Query(..., alias="date", description="Facility-local date"),
    simulator: Optional[str] = Query(None),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[ScheduledBookingResponse]:
    """Bookings starting on a facility-local day, optionally for one simulator."""
    try:
        bookings = await asyncio.to_thread(booking_service.get_bookings_for_day, simulator, day)
        return [_scheduled(booking) for booking in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[BookingResponse])
async def list_my_bookings(
    upcoming_only: bool = Query(True),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    try:
        bookings = await asyncio.to_thread(
            booking_service.get_user_bookings, current_actor, upcoming_only
        )
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/display", response_model=List[DisplayBookingResponse])
async def display_board(
    day: date = Query(..., alias="date"),
    simulator: Optional[str] = Query(None),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[DisplayBookingResponse]:
    """Lobby display board. Public: member names only, no contact details."""
    try:
        rows = await asyncio.to_thread(booking_service.get_display_bookings, simulator, day)
        return [DisplayBookingResponse.model_validate(row) for row in rows]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/report", response_model=List[BookingReportRowResponse])
async def bookings_report(
    start: date = Query(...),
    end: date = Query(...),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingReportRowResponse]:
    """Admin report of bookings between two local dates, inclusive."""
    try:
        rows = await asyncio.to_thread(
            booking_service.get_bookings_report, current_actor, start, end
        )
        return [
            BookingReportRowResponse(
                id=row.booking.id,
                user_id=row.booking.user_id,
                user_name=row.booking.user.name if row.booking.user else None,
                user_email=row.booking.user.email if row.booking.user else None,
                simulator=row.booking.simulator,
                start_time=row.booking.start_time,
                end_time=row.booking.end_time,
                created_at=row.booking.created_at,
                guest_fee_total=row.guest_fee_total,
            )
            for row in rows
        ]
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 2: Root routes
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    background_tasks: BackgroundTasks,
    booking_data: BookingCreate = Body(...),
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingResponse:
    """
    Book a simulator for one fixed-length window.

    The confirmation email is sent after the response; a delivery failure
    never affects the booking.
    """

    def schedule_confirmation(payload: BookingConfirmation) -> None:
        background_tasks.add_task(notification_service.send_booking_confirmation, payload)

    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            current_actor,
            booking_data.simulator,
            booking_data.start_time,
            target_user_id=booking_data.target_user_id,
            notify=schedule_confirmation,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# SECTION 3: Routes with path parameters
# ============================================================================


@router.delete("/{booking_id}", response_model=CancelBookingResponse)
async def cancel_booking(
    booking_id: int,
    current_actor: Actor = Depends(get_current_actor),
    booking_service: BookingService = Depends(get_booking_service),
) -> CancelBookingResponse:
    try:
        deleted_fees = await asyncio.to_thread(
            booking_service.cancel_booking, booking_id, current_actor
        )
        return CancelBookingResponse(success=True, deleted_guest_fees=deleted_fees)
    except DomainException as e:
        handle_domain_exception(e)
