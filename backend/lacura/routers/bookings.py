from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from lacura.core.dependencies import get_booking_service
from lacura.core.exceptions import BadRequestError
from lacura.schemas.booking import (
    AvailabilityRequest,
    AvailabilityResponse,
    Booking,
    BookingListResponse,
    BookingResponse,
    BookingSummary,
    CancelBookingRequest,
    CancelBookingResponse,
    CreateBookingRequest,
    RescheduleBookingRequest,
)
from lacura.services.booking_service import BookingService
from lacura.utils.datetime_utils import format_iso_ms, format_iso_z, parse_iso_datetime

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _parse(value: str, message: str) -> datetime:
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise BadRequestError(message)


def _booking_response(booking: Booking) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        start_time=format_iso_z(booking.start),
        end_time=format_iso_z(booking.end),
        web_link=booking.web_link,
    )


@router.post("/availability", response_model=AvailabilityResponse, response_model_by_alias=True)
async def check_availability(
    request: AvailabilityRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Open 30-minute business-hour slots between two instants."""
    if not request.start_date or not request.end_date:
        raise BadRequestError("startDate and endDate required (ISO format)")

    message = "Invalid date format. Use ISO 8601 format."
    start = _parse(request.start_date, message)
    end = _parse(request.end_date, message)
    if end < start:
        raise BadRequestError("endDate must not be before startDate")

    slots, busy_count = await service.check_availability(start, end)
    return AvailabilityResponse(
        available_slots=[format_iso_ms(slot) for slot in slots],
        busy_times=busy_count,
    )


@router.post("/create", response_model=BookingResponse, response_model_by_alias=True)
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    if not request.start_time or not request.client_email:
        raise BadRequestError("startTime and clientEmail required")

    start = _parse(request.start_time, "Invalid startTime format. Use ISO 8601 format.")
    booking = await service.create_booking(
        start=start,
        client_email=request.client_email,
        location=request.location,
        dietary_notes=request.dietary_notes,
        client_name=request.client_name,
    )
    return _booking_response(booking)


@router.get("/list", response_model=BookingListResponse, response_model_by_alias=True)
async def list_bookings(
    email: Optional[str] = Query(None),
    x_user_email: Optional[str] = Header(None),
    service: BookingService = Depends(get_booking_service),
):
    client_email = email or x_user_email
    if not client_email:
        raise BadRequestError("email query parameter or x-user-email header required")

    bookings = await service.list_bookings(client_email)
    return BookingListResponse(bookings=[
        BookingSummary(
            id=b.id,
            subject=b.subject,
            start_time=format_iso_z(b.start),
            end_time=format_iso_z(b.end),
            location=b.location,
            web_link=b.web_link,
        )
        for b in bookings
    ])


@router.post("/cancel", response_model=CancelBookingResponse)
async def cancel_booking(
    request: CancelBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    if not request.event_id or not request.client_email:
        raise BadRequestError("eventId and clientEmail required")

    await service.cancel_booking(request.event_id, request.client_email)
    return CancelBookingResponse(success=True, message="Booking cancelled")


@router.post("/reschedule", response_model=BookingResponse, response_model_by_alias=True)
async def reschedule_booking(
    request: RescheduleBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    if not request.event_id or not request.new_start_time or not request.client_email:
        raise BadRequestError("eventId, newStartTime, and clientEmail required")

    new_start = _parse(request.new_start_time, "Invalid newStartTime format. Use ISO 8601 format.")
    booking = await service.reschedule_booking(request.event_id, new_start, request.client_email)
    return _booking_response(booking)
