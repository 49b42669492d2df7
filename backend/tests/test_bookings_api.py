import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from lacura.core.dependencies import get_booking_service
from lacura.core.exceptions import UpstreamError
from lacura.main import app
from lacura.schemas.booking import Booking, BusyInterval
from lacura.services.booking_service import BookingService


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


def make_booking(id="ev1", attendees=("jane@example.com",), start=utc(2024, 11, 4, 14, 0)):
    return Booking(
        id=id,
        subject="La Cura Session - Jane",
        start=start,
        end=start + timedelta(minutes=30),
        attendees=list(attendees),
        location="Studio",
        web_link=f"https://outlook.office365.com/{id}",
    )


@pytest.fixture
def graph():
    mock = MagicMock()
    mock.get_free_busy = AsyncMock(return_value=[])
    mock.create_event = AsyncMock(return_value=make_booking())
    mock.list_events = AsyncMock(return_value=[])
    mock.get_event = AsyncMock(return_value=make_booking())
    mock.update_event_time = AsyncMock()
    mock.delete_event = AsyncMock()
    return mock


@pytest.fixture
def client(graph):
    app.dependency_overrides[get_booking_service] = lambda: BookingService(graph)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_availability_excludes_busy_slot(client, graph):
    graph.get_free_busy.return_value = [BusyInterval(start=utc(2024, 11, 4, 14, 0), end=utc(2024, 11, 4, 14, 30))]

    response = client.post("/bookings/availability", json={
        "startDate": "2024-11-04T09:00:00Z",
        "endDate": "2024-11-04T18:00:00Z",
    })

    assert response.status_code == 200
    data = response.json()
    assert data["busyTimes"] == 1
    assert "2024-11-04T14:00:00.000Z" not in data["availableSlots"]
    assert "2024-11-04T13:30:00.000Z" in data["availableSlots"]
    assert "2024-11-04T14:30:00.000Z" in data["availableSlots"]


def test_availability_requires_both_dates(client, graph):
    response = client.post("/bookings/availability", json={"startDate": "2024-11-04T09:00:00Z"})

    assert response.status_code == 400
    assert response.json() == {"error": "startDate and endDate required (ISO format)"}
    graph.get_free_busy.assert_not_called()


def test_availability_rejects_invalid_dates(client):
    response = client.post("/bookings/availability", json={"startDate": "next tuesday", "endDate": "2024-11-04"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid date format. Use ISO 8601 format."


def test_availability_rejects_reversed_window(client):
    response = client.post("/bookings/availability", json={
        "startDate": "2024-11-05T09:00:00Z",
        "endDate": "2024-11-04T09:00:00Z",
    })

    assert response.status_code == 400


def test_create_booking(client, graph):
    response = client.post("/bookings/create", json={
        "startTime": "2024-11-04T14:00:00Z",
        "clientEmail": "jane@example.com",
        "clientName": "Jane",
        "dietaryNotes": "No dairy",
        "location": "Studio",
    })

    assert response.status_code == 200
    assert response.json() == {
        "id": "ev1",
        "startTime": "2024-11-04T14:00:00Z",
        "endTime": "2024-11-04T14:30:00Z",
        "webLink": "https://outlook.office365.com/ev1",
    }
    kwargs = graph.create_event.call_args.kwargs
    assert kwargs["start"] == utc(2024, 11, 4, 14, 0)
    assert kwargs["subject"] == "La Cura Session - Jane"
    assert kwargs["body"] == "Client: jane@example.com\n\nDietary Notes: No dairy"


def test_create_booking_requires_fields(client, graph):
    response = client.post("/bookings/create", json={"startTime": "2024-11-04T14:00:00Z"})

    assert response.status_code == 400
    assert response.json() == {"error": "startTime and clientEmail required"}
    graph.create_event.assert_not_called()


def test_list_bookings_filters_by_attendee(client, graph):
    graph.list_events.return_value = [
        make_booking("ev1", attendees=["Jane@Example.com"]),
        make_booking("ev2", attendees=["someone@else.com"]),
    ]

    response = client.get("/bookings/list", params={"email": "jane@example.com"})

    assert response.status_code == 200
    bookings = response.json()["bookings"]
    assert [b["id"] for b in bookings] == ["ev1"]
    assert bookings[0]["location"] == "Studio"


def test_list_bookings_accepts_header(client, graph):
    graph.list_events.return_value = [make_booking("ev1")]

    response = client.get("/bookings/list", headers={"x-user-email": "jane@example.com"})

    assert response.status_code == 200
    assert len(response.json()["bookings"]) == 1


def test_list_bookings_requires_email(client):
    response = client.get("/bookings/list")

    assert response.status_code == 400
    assert "email" in response.json()["error"]


def test_cancel_by_attendee_deletes(client, graph):
    response = client.post("/bookings/cancel", json={"eventId": "ev1", "clientEmail": "jane@example.com"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Booking cancelled"}
    graph.delete_event.assert_awaited_once_with("ev1")


def test_cancel_by_non_attendee_is_forbidden(client, graph):
    response = client.post("/bookings/cancel", json={"eventId": "ev1", "clientEmail": "intruder@example.com"})

    assert response.status_code == 403
    assert response.json() == {"error": "Not authorized to cancel this booking"}
    graph.delete_event.assert_not_called()


def test_reschedule_by_non_attendee_is_forbidden(client, graph):
    response = client.post("/bookings/reschedule", json={
        "eventId": "ev1",
        "newStartTime": "2024-11-05T10:00:00Z",
        "clientEmail": "intruder@example.com",
    })

    assert response.status_code == 403
    assert response.json() == {"error": "Not authorized to reschedule this booking"}
    graph.update_event_time.assert_not_called()


def test_reschedule_by_attendee(client, graph):
    graph.update_event_time.return_value = make_booking(start=utc(2024, 11, 5, 10, 0))

    response = client.post("/bookings/reschedule", json={
        "eventId": "ev1",
        "newStartTime": "2024-11-05T10:00:00Z",
        "clientEmail": "jane@example.com",
    })

    assert response.status_code == 200
    assert response.json()["startTime"] == "2024-11-05T10:00:00Z"
    assert response.json()["endTime"] == "2024-11-05T10:30:00Z"
    graph.update_event_time.assert_awaited_once_with("ev1", utc(2024, 11, 5, 10, 0))


def test_upstream_failure_renders_error(client, graph):
    graph.get_event.side_effect = UpstreamError("Graph call failed with status 503", upstream_status=503)

    response = client.post("/bookings/cancel", json={"eventId": "ev1", "clientEmail": "jane@example.com"})

    assert response.status_code == 500
    assert response.json() == {"error": "Graph call failed with status 503"}


def test_unexpected_error_returns_request_id(client, graph):
    graph.list_events.side_effect = RuntimeError("boom")

    response = client.get("/bookings/list", params={"email": "jane@example.com"})

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "Internal error"
    assert data["requestId"]
    assert "details" not in data
