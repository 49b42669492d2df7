from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

class BusyInterval(BaseModel):
    start: datetime
    end: datetime

class Booking(BaseModel):
    id: str
    subject: str = ""
    start: datetime
    end: datetime
    attendees: List[str] = []
    body: Optional[str] = None
    location: Optional[str] = None
    categories: List[str] = []
    web_link: Optional[str] = None

    def has_attendee(self, email: str) -> bool:
        needle = email.strip().lower()
        return any(a.lower() == needle for a in self.attendees)

class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

class AvailabilityRequest(CamelModel):
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")

class AvailabilityResponse(CamelModel):
    available_slots: List[str] = Field(alias="availableSlots")
    busy_times: int = Field(alias="busyTimes")

class CreateBookingRequest(CamelModel):
    start_time: Optional[str] = Field(None, alias="startTime")
    client_email: Optional[str] = Field(None, alias="clientEmail")
    location: Optional[str] = None
    dietary_notes: Optional[str] = Field(None, alias="dietaryNotes")
    client_name: Optional[str] = Field(None, alias="clientName")

class BookingResponse(CamelModel):
    id: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    web_link: Optional[str] = Field(None, alias="webLink")

class BookingSummary(CamelModel):
    id: str
    subject: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    location: Optional[str] = None
    web_link: Optional[str] = Field(None, alias="webLink")

class BookingListResponse(BaseModel):
    bookings: List[BookingSummary]

class CancelBookingRequest(CamelModel):
    event_id: Optional[str] = Field(None, alias="eventId")
    client_email: Optional[str] = Field(None, alias="clientEmail")

class CancelBookingResponse(BaseModel):
    success: bool
    message: str

class RescheduleBookingRequest(CamelModel):
    event_id: Optional[str] = Field(None, alias="eventId")
    new_start_time: Optional[str] = Field(None, alias="newStartTime")
    client_email: Optional[str] = Field(None, alias="clientEmail")
