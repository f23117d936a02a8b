"""
Tests for the HTTP API, with the wiring swapped for in-process fixtures.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from salon_scheduling.application.use_cases.booking_wizard import BookingUseCase
from salon_scheduling.main import app
from salon_scheduling.wiring.dependencies import (
    get_appointment_manager,
    get_availability_resolver,
    get_booking_use_case,
)

DATE = "2025-10-11"
BOOKING = {
    "service_id": "1",
    "staff_id": "2",
    "date": DATE,
    "time": "02:00 PM",
    "customer": {
        "first_name": "Nadia",
        "last_name": "Perera",
        "email": "nadia.perera@example.com",
        "phone": "+94 77 111 2233",
    },
    "special_requests": "Window seat please",
}


@pytest.fixture
def client(backend, resolver, manager):
    app.dependency_overrides[get_availability_resolver] = lambda: resolver
    app.dependency_overrides[get_booking_use_case] = lambda: BookingUseCase(
        catalog=backend, resolver=resolver, booking=backend
    )
    app.dependency_overrides[get_appointment_manager] = lambda: manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_availability(client):
    resp = client.get("/api/v1/salons/1/availability", params={"date": DATE, "staff_id": "1", "service_id": "1"})
    assert resp.status_code == 200

    body = resp.json()
    assert len(body["slots"]) == 16
    assert body["slots"][0]["time"] == "9:00 AM"
    assert body["slots"][0]["end_time"] == "10:00 AM"
    assert list(body["bands"]) == ["Morning", "Afternoon", "Evening"]
    assert len(body["bands"]["Evening"]) == 2


def test_availability_errors(client):
    assert client.get("/api/v1/salons/1/availability", params={"date": "tomorrow"}).status_code == 400
    assert client.get("/api/v1/salons/1/availability", params={"date": DATE, "service_id": "99"}).status_code == 404
    assert client.get("/api/v1/salons/9/availability", params={"date": DATE}).status_code == 404


def test_booking_then_listing(client):
    resp = client.post("/api/v1/salons/1/bookings", json=BOOKING)
    assert resp.status_code == 201

    created = resp.json()
    assert created["status"] == "PENDING"
    assert created["start_time"] == "2:00 PM"
    assert created["end_time"] == "3:00 PM"
    assert created["assigned_staff"] == "Michael Chen"
    assert created["allowed_actions"] == ["cancel", "confirm", "reschedule"]

    listed = client.get("/api/v1/appointments", params={"search": "nadia.perera"}).json()
    assert [item["id"] for item in listed["items"]] == [created["id"]]

    slots = client.get("/api/v1/salons/1/availability", params={"date": DATE, "staff_id": "2"}).json()["slots"]
    assert not next(slot for slot in slots if slot["time"] == "2:00 PM")["available"]


def test_double_booking_conflicts(client):
    assert client.post("/api/v1/salons/1/bookings", json=BOOKING).status_code == 201
    resp = client.post("/api/v1/salons/1/bookings", json=BOOKING)
    assert resp.status_code == 409


def test_booking_validation(client):
    bad_email = {**BOOKING, "customer": {**BOOKING["customer"], "email": "nadia"}}
    assert client.post("/api/v1/salons/1/bookings", json=bad_email).status_code == 400

    lunch = {**BOOKING, "time": "1:00 PM"}
    assert client.post("/api/v1/salons/1/bookings", json=lunch).status_code == 400

    missing_name = {**BOOKING, "customer": {**BOOKING["customer"], "first_name": ""}}
    resp = client.post("/api/v1/salons/1/bookings", json=missing_name)
    assert resp.status_code == 400
    assert resp.json()["detail"]["missing"] == ["customer_info.first_name"]

    unknown_service = {**BOOKING, "service_id": "99"}
    assert client.post("/api/v1/salons/1/bookings", json=unknown_service).status_code == 400


def test_list_appointments_filters_and_pages(client):
    body = client.get("/api/v1/appointments", params={"status": "CONFIRMED"}).json()
    assert [item["number"] for item in body["items"]] == ["#APT001", "#APT004"]

    body = client.get("/api/v1/appointments", params={"page": 2, "size": 2}).json()
    assert [item["number"] for item in body["items"]] == ["#APT003", "#APT004"]
    assert (body["total_items"], body["total_pages"]) == (5, 3)

    assert client.get("/api/v1/appointments", params={"page": 0}).status_code == 422


def test_summary(client):
    body = client.get("/api/v1/appointments/summary", params={"today": DATE}).json()
    assert body["total_count"] == 5
    assert body["today_count"] == 4
    assert body["status_counts"]["CONFIRMED"] == 2
    assert body["today_revenue"] == 7500

    assert client.get("/api/v1/appointments/summary", params={"today": "soon"}).status_code == 400


def test_export(client):
    resp = client.get("/api/v1/appointments/export", params={"status": "CANCELLED"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    lines = resp.text.strip().splitlines()
    assert lines[0] == "id,number,customer,service,date,time,status,price"
    assert lines[1].startswith("apt003,#APT003,Mike Williams")


def test_lifecycle_endpoints(client):
    resp = client.post("/api/v1/appointments/apt002/confirm", json={"notify_sms": False})
    assert resp.status_code == 200
    assert resp.json()["status"] == "CONFIRMED"

    assert client.post("/api/v1/appointments/apt002/confirm", json={}).status_code == 409

    resp = client.post(
        "/api/v1/appointments/apt005/reschedule",
        json={"new_date": "2025-10-12", "new_time": "11:00 AM"},
    )
    assert resp.status_code == 200
    assert (resp.json()["start_time"], resp.json()["end_time"]) == ("11:00 AM", "11:45 AM")

    resp = client.post("/api/v1/appointments/apt001/complete", json={"notes": "All good"})
    assert resp.json()["status"] == "COMPLETED"

    resp = client.post("/api/v1/appointments/apt004/no-show")
    assert resp.json()["status"] == "NO_SHOW"
    assert resp.json()["allowed_actions"] == []


def test_cancel_endpoint(client):
    resp = client.post("/api/v1/appointments/apt002/cancel", json={"reason": "Bad weather"})
    assert resp.status_code == 400

    resp = client.post(
        "/api/v1/appointments/apt002/cancel",
        json={"reason": "Customer requested", "cancelled_by": "CUSTOMER", "process_refund": False},
    )
    assert resp.status_code == 200
    assert resp.json()["cancelled_by"] == "CUSTOMER"
    assert not resp.json()["refund_requested"]

    assert client.post("/api/v1/appointments/apt002/cancel", json={"reason": "Emergency"}).status_code == 409
    assert client.post("/api/v1/appointments/nope/cancel", json={"reason": "Emergency"}).status_code == 404
