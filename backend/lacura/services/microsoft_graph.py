import uuid
import httpx
from typing import List, Optional, Dict, Any
from datetime import datetime, timedelta

from lacura.core.config import Settings
from lacura.core.exceptions import ForbiddenError, NotFoundError, UpstreamError
from lacura.schemas.booking import Booking, BusyInterval
from lacura.services.graph_auth import GraphTokenProvider
from lacura.utils.datetime_utils import parse_iso_datetime, format_graph_datetime
from lacura.utils.logger import get_logger

logger = get_logger("microsoft_graph")

SLOT_DURATION = timedelta(minutes=30)


class MicrosoftGraphClient:
    """
    Calendar gateway for the single La Cura mailbox.

    Every call is scoped to `CALENDAR_OWNER_EMAIL` and authenticated with the
    service identity; no per-user credentials are involved. The gateway
    does not authorize callers, that is the booking service's job.
    """

    GRAPH_API_URL = "https://graph.microsoft.com/v1.0"

    def __init__(
        self,
        settings: Settings,
        token_provider: Optional[GraphTokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.owner = settings.CALENDAR_OWNER_EMAIL
        self.token_provider = token_provider or GraphTokenProvider(settings, transport=transport)
        self._transport = transport

    async def _headers(self) -> Dict[str, str]:
        token = await self.token_provider.get_token()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "Prefer": "outlook.timezone=\"UTC\"" # Ensure UTC
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = await self._headers()
        headers.update(kwargs.pop("headers", {}))
        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.request(method, f"{self.GRAPH_API_URL}{path}", headers=headers, **kwargs)
        self._raise_for_status(response, f"{method} {path}")
        return response

    def _raise_for_status(self, response: httpx.Response, operation: str) -> None:
        if not response.is_error:
            return
        detail = response.text[:300]
        logger.error(f"Graph call failed: {operation} -> {response.status_code} {detail}")
        if response.status_code == 403:
            raise ForbiddenError("Permission denied. Check calendar permissions and the app registration.")
        if response.status_code == 404:
            raise NotFoundError("Calendar resource not found.")
        raise UpstreamError(f"Graph call failed with status {response.status_code}", upstream_status=response.status_code)

    def _parse_event(self, item: Dict[str, Any]) -> Booking:
        start = item.get("start", {})
        end = item.get("end", {})

        attendees = [
            a.get("emailAddress", {}).get("address")
            for a in item.get("attendees", []) or []
            if a.get("emailAddress", {}).get("address")
        ]

        return Booking(
            id=item["id"],
            subject=item.get("subject") or "",
            start=parse_iso_datetime(start["dateTime"]),
            end=parse_iso_datetime(end["dateTime"]),
            attendees=attendees,
            body=(item.get("body") or {}).get("content"),
            location=(item.get("location") or {}).get("displayName"),
            categories=item.get("categories") or [],
            web_link=item.get("webLink"),
        )

    async def get_free_busy(self, start: datetime, end: datetime) -> List[BusyInterval]:
        payload = {
            "schedules": [self.owner],
            "startTime": {"dateTime": format_graph_datetime(start), "timeZone": "UTC"},
            "endTime": {"dateTime": format_graph_datetime(end), "timeZone": "UTC"},
            "availabilityViewInterval": 30,
        }
        response = await self._request("POST", f"/users/{self.owner}/calendar/getSchedule", json=payload)
        data = response.json()

        schedules = data.get("value") or []
        items = schedules[0].get("scheduleItems", []) if schedules else []
        intervals = []
        for item in items:
            if item.get("status") == "free":
                continue
            intervals.append(BusyInterval(
                start=parse_iso_datetime(item["start"]["dateTime"]),
                end=parse_iso_datetime(item["end"]["dateTime"]),
            ))
        return intervals

    async def create_event(
        self,
        start: datetime,
        attendee_email: str,
        subject: str,
        body: str,
        location: Optional[str] = None,
    ) -> Booking:
        end = start + SLOT_DURATION
        event: Dict[str, Any] = {
            "subject": subject,
            "start": {"dateTime": format_graph_datetime(start), "timeZone": "UTC"},
            "end": {"dateTime": format_graph_datetime(end), "timeZone": "UTC"},
            "body": {"contentType": "text", "content": body},
            "attendees": [
                {
                    "emailAddress": {"address": attendee_email},
                    "type": "required"
                }
            ],
            "categories": [self.settings.BOOKING_CATEGORY],
        }
        if location:
            event["location"] = {"displayName": location}

        response = await self._request("POST", f"/users/{self.owner}/calendar/events", json=event)
        return self._parse_event(response.json())

    async def list_events(self, category: Optional[str] = None) -> List[Booking]:
        category = category or self.settings.BOOKING_CATEGORY
        params = {
            "$filter": f"categories/any(c: c eq '{category}')",
            "$select": "id,subject,start,end,location,attendees,categories,webLink",
            "$top": 100,
        }
        response = await self._request("GET", f"/users/{self.owner}/calendar/events", params=params)
        return [self._parse_event(item) for item in response.json().get("value", [])]

    async def get_event(self, event_id: str) -> Booking:
        response = await self._request("GET", f"/users/{self.owner}/calendar/events/{event_id}")
        return self._parse_event(response.json())

    async def update_event_time(self, event_id: str, new_start: datetime) -> Booking:
        # Rescheduling always keeps the fixed 30 minute duration
        new_end = new_start + SLOT_DURATION
        patch_body = {
            "start": {"dateTime": format_graph_datetime(new_start), "timeZone": "UTC"},
            "end": {"dateTime": format_graph_datetime(new_end), "timeZone": "UTC"},
        }
        response = await self._request("PATCH", f"/users/{self.owner}/calendar/events/{event_id}", json=patch_body)
        return self._parse_event(response.json())

    async def delete_event(self, event_id: str) -> None:
        await self._request("DELETE", f"/users/{self.owner}/calendar/events/{event_id}")

    async def send_mail(self, to: str, subject: str, html: str, sender: Optional[str] = None) -> str:
        """Send through the sender's mailbox; returns the client request id."""
        sender = sender or self.owner
        request_id = str(uuid.uuid4())
        message = {
            "message": {
                "subject": subject,
                "body": {
                    "contentType": "HTML",
                    "content": html
                },
                "toRecipients": [
                    {"emailAddress": {"address": to}}
                ]
            },
            "saveToSentItems": "true"
        }
        await self._request(
            "POST",
            f"/users/{sender}/sendMail",
            json=message,
            headers={"client-request-id": request_id},
        )
        return request_id
