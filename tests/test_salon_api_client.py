"""
Tests for the HTTP salon backend adapter, using httpx.MockTransport.
"""

from __future__ import annotations

import json

import httpx
import pytest

from salon_scheduling.application.dto.booking_request import CreateBookingRequest, CustomerInfoDTO
from salon_scheduling.application.exceptions import (
    InvalidRequest,
    NetworkError,
    NotFound,
    ServerError,
    SlotConflict,
)
from salon_scheduling.domain.entities.appointment import AppointmentStatus
from salon_scheduling.infrastructure.salon_api.http_client import SalonApiClient, appointment_from_payload

BASE_URL = "http://salon.test/api"


def _client(handler, token="secret") -> SalonApiClient:
    return SalonApiClient(base_url=BASE_URL, token=token, client=httpx.Client(transport=httpx.MockTransport(handler)))


def _request(staff_id="any") -> CreateBookingRequest:
    return CreateBookingRequest(
        salon_id="1",
        service_id="1",
        staff_id=staff_id,
        date="2025-10-11",
        time="02:00 PM",
        customer=CustomerInfoDTO(
            first_name="Kumari",
            last_name="Silva",
            email="kumari.silva@gmail.com",
            phone="+94774567890",
        ),
        special_requests="Wants auburn color",
    )


def test_list_services_and_staff():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer secret"
        if request.url.path == "/api/services":
            assert request.url.params["salonId"] == "1"
            return httpx.Response(
                200,
                json=[{"id": 1, "name": "Balayage", "category": "Coloring", "durationMinutes": 240, "price": 200}],
            )
        if request.url.path == "/api/salons/1/staff":
            return httpx.Response(200, json=[{"id": 7, "name": "Emma Thompson", "available": False}])
        return httpx.Response(404)

    client = _client(handler)
    (service,) = client.list_services("1")
    (member,) = client.list_staff("1")

    assert (service.id, service.duration, service.price) == ("1", 240, 200.0)
    assert (member.id, member.available) == ("7", False)


def test_booked_slots_are_the_unavailable_ones():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/appointments/slots/available"
        assert request.url.params["staffId"] == "2"
        return httpx.Response(
            200,
            json=[
                {"startTime": "09:00:00", "isAvailable": True},
                {"startTime": "09:30:00", "isAvailable": False},
                {"startTime": "14:00", "isAvailable": False},
            ],
        )

    assert _client(handler).list_booked_slots("1", "2025-10-11", "2") == {"9:30 AM", "2:00 PM"}


def test_any_staff_is_not_sent_as_a_filter():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "staffId" not in request.url.params
        return httpx.Response(200, json=[])

    assert _client(handler).list_booked_slots("1", "2025-10-11", "any") == set()


def test_reserve_refuses_slots_the_backend_reports_taken():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=[{"startTime": "10:00:00", "isAvailable": False}])

    client = _client(handler)
    client.reserve_slot("1", "2025-10-11", "9:30 AM", staff_id="2")
    with pytest.raises(SlotConflict):
        client.reserve_slot("1", "2025-10-11", "10:00 AM", staff_id="2")

    client.release_slot("1", "2025-10-11", "10:00 AM", staff_id="2")
    assert len(requests) == 2


def test_create_booking_payload_and_response():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(json.loads(request.content))
        return httpx.Response(
            201,
            json={
                "id": 42,
                "appointmentNumber": "#APT042",
                "customerName": "Kumari Silva",
                "customerEmail": "kumari.silva@gmail.com",
                "customerPhone": "+94774567890",
                "serviceId": 1,
                "serviceName": "Women's Haircut & Style",
                "servicePrice": 65,
                "durationMinutes": 60,
                "appointmentDate": "2025-10-11",
                "startTime": "14:00:00",
                "status": "pending",
            },
        )

    appointment = _client(handler).create_booking(_request())

    assert seen["startTime"] == "14:00"
    assert seen["staffId"] is None
    assert seen["customerName"] == "Kumari Silva"
    assert appointment.id == "42"
    assert appointment.number == "#APT042"
    assert (appointment.start_time, appointment.end_time) == ("2:00 PM", "3:00 PM")
    assert appointment.status == AppointmentStatus.PENDING
    assert appointment.salon_id == "1"


@pytest.mark.parametrize(
    "status_code, error",
    [
        (400, InvalidRequest),
        (404, NotFound),
        (409, SlotConflict),
        (500, ServerError),
        (503, ServerError),
        (418, ServerError),
    ],
)
def test_status_codes_map_to_errors(status_code, error):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, json={"message": "nope"})

    with pytest.raises(error):
        _client(handler).create_booking(_request(staff_id="1"))


def test_backend_message_is_kept():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Slot taken by another customer"})

    with pytest.raises(SlotConflict, match="Slot taken"):
        _client(handler).list_services("1")


def test_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError) as exc:
        _client(handler).list_staff("1")
    assert exc.value.retryable


def test_appointment_from_payload_uses_end_time_when_given():
    appointment = appointment_from_payload(
        {
            "id": "a1",
            "appointmentDate": "2025-10-12",
            "startTime": "10:00",
            "endTime": "10:45",
            "status": "CONFIRMED",
            "bookingDate": "2025-10-01T09:00:00+00:00",
        }
    )
    assert appointment.end_time == "10:45 AM"
    assert appointment.status == AppointmentStatus.CONFIRMED
    assert appointment.salon_id is None
    assert appointment.booked_at.year == 2025
