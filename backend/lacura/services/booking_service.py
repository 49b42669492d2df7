from datetime import datetime
from typing import List, Optional, Tuple

from lacura.core.exceptions import NotAttendeeError
from lacura.schemas.booking import Booking
from lacura.services.availability import calculate_available_slots
from lacura.services.microsoft_graph import MicrosoftGraphClient
from lacura.utils.logger import get_logger

logger = get_logger("booking_service")


class BookingService:
    """
    Booking operations on top of the calendar gateway.

    Owns the one authorization rule of the system: a booking may only be
    cancelled or rescheduled by an email address listed among its attendees.
    """

    def __init__(self, calendar: MicrosoftGraphClient):
        self.calendar = calendar

    async def check_availability(self, start: datetime, end: datetime) -> Tuple[List[datetime], int]:
        busy = await self.calendar.get_free_busy(start, end)
        slots = calculate_available_slots(start, end, busy)
        logger.info(f"Availability {start.isoformat()} -> {end.isoformat()}: {len(slots)} slots, {len(busy)} busy")
        return slots, len(busy)

    async def create_booking(
        self,
        start: datetime,
        client_email: str,
        location: Optional[str] = None,
        dietary_notes: Optional[str] = None,
        client_name: Optional[str] = None,
    ) -> Booking:
        subject = f"La Cura Session - {client_name or client_email}"
        body = f"Client: {client_email}"
        if dietary_notes:
            body += f"\n\nDietary Notes: {dietary_notes}"

        booking = await self.calendar.create_event(
            start=start,
            attendee_email=client_email,
            subject=subject,
            body=body,
            location=location,
        )
        logger.info(f"Created booking {booking.id} at {booking.start.isoformat()}")
        return booking

    async def list_bookings(self, client_email: str) -> List[Booking]:
        events = await self.calendar.list_events()
        return [event for event in events if event.has_attendee(client_email)]

    async def _authorized_event(self, event_id: str, client_email: str, action: str) -> Booking:
        event = await self.calendar.get_event(event_id)
        if not event.has_attendee(client_email):
            logger.warning(f"Refused to {action} booking {event_id}: requester is not an attendee")
            raise NotAttendeeError(f"Not authorized to {action} this booking")
        return event

    async def cancel_booking(self, event_id: str, client_email: str) -> None:
        await self._authorized_event(event_id, client_email, "cancel")
        await self.calendar.delete_event(event_id)
        logger.info(f"Cancelled booking {event_id}")

    async def reschedule_booking(self, event_id: str, new_start: datetime, client_email: str) -> Booking:
        await self._authorized_event(event_id, client_email, "reschedule")
        booking = await self.calendar.update_event_time(event_id, new_start)
        logger.info(f"Rescheduled booking {event_id} to {booking.start.isoformat()}")
        return booking
