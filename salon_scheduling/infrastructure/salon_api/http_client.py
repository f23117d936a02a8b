from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from salon_scheduling.application.dto.booking_request import CreateBookingRequest
from salon_scheduling.application.exceptions import InvalidRequest, NetworkError, NotFound, ServerError, SlotConflict
from salon_scheduling.application.ports.availability import AvailabilityPort
from salon_scheduling.application.ports.booking import BookingPort
from salon_scheduling.application.ports.catalog import CatalogPort
from salon_scheduling.application.utils.time_arithmetic import add_duration, from_24h, normalize_label, to_24h
from salon_scheduling.core.config import settings
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, CustomerSummary, ServiceSummary
from salon_scheduling.domain.entities.catalog import ANY_STAFF_ID, Service, StaffMember

DEFAULT_SERVICE_DURATION = 60


class SalonApiClient(CatalogPort, AvailabilityPort, BookingPort):
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._base_url = (base_url or settings.SALON_API_BASE_URL).rstrip("/")
        self._token = token if token is not None else settings.SALON_API_TOKEN
        self._client = client or httpx.Client(timeout=timeout or settings.SALON_API_TIMEOUT_SECONDS)
        self._logger = logging.getLogger(__name__)

    def list_services(self, salon_id: str) -> list[Service]:
        data = self._request("GET", "/services", params={"salonId": salon_id})
        return [
            Service(
                id=str(item["id"]),
                name=item["name"],
                category=item.get("category") or "General",
                duration=int(item.get("durationMinutes") or DEFAULT_SERVICE_DURATION),
                price=float(item.get("price") or 0),
            )
            for item in data or []
        ]

    def list_staff(self, salon_id: str) -> list[StaffMember]:
        data = self._request("GET", f"/salons/{salon_id}/staff")
        return [
            StaffMember(
                id=str(item["id"]),
                name=item["name"],
                available=bool(item.get("available", True)),
                role=item.get("role"),
            )
            for item in data or []
        ]

    def list_booked_slots(self, salon_id: str, date: str, staff_id: str | None = None) -> set[str]:
        params = {"salonId": salon_id, "date": date}
        if staff_id and staff_id != ANY_STAFF_ID:
            params["staffId"] = staff_id
        data = self._request("GET", "/appointments/slots/available", params=params)
        return {from_24h(slot["startTime"]) for slot in data or [] if not slot.get("isAvailable", True)}

    def reserve_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        # the backend records reservations itself; only refuse slots it reports as taken
        label = normalize_label(label)
        if label in self.list_booked_slots(salon_id, date, staff_id):
            raise SlotConflict(f"{label} on {date} is already booked")

    def release_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        self._logger.debug(
            "Slot release left to the backend",
            extra={"salon_id": salon_id, "slot_time": label},
        )

    def create_booking(self, request: CreateBookingRequest) -> Appointment:
        payload = {
            "customerName": request.customer.full_name,
            "customerEmail": request.customer.email,
            "customerPhone": request.customer.phone,
            "preferredContact": "EMAIL",
            "salonId": request.salon_id,
            "serviceId": request.service_id,
            "staffId": None if request.staff_id == ANY_STAFF_ID else request.staff_id,
            "appointmentDate": request.date,
            "startTime": to_24h(request.time),
            "timeSlotId": request.time_slot_id,
            "notes": request.special_requests,
        }
        data = self._request("POST", "/appointments", json=payload)
        appointment = appointment_from_payload(data, salon_id=request.salon_id)
        self._logger.info(
            "Booking created",
            extra={"appointment_id": appointment.id, "salon_id": request.salon_id},
        )
        return appointment

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            resp = self._client.request(method, f"{self._base_url}{path}", headers=headers, **kwargs)
        except httpx.TransportError as e:
            self._logger.error("Salon API unreachable", extra={"path": path, "error": str(e)})
            raise NetworkError("Network error. Please check your connection.") from e

        if resp.status_code >= 400:
            message = _error_message(resp)
            self._logger.error(
                "Salon API request failed",
                extra={"path": path, "status": resp.status_code, "error_message": message},
            )
            if resp.status_code == 400:
                raise InvalidRequest(message or "Invalid request data")
            if resp.status_code == 404:
                raise NotFound(message or "Resource not found")
            if resp.status_code == 409:
                raise SlotConflict(message or "Time slot no longer available")
            if resp.status_code >= 500:
                raise ServerError("Server error. Please try again later.")
            raise ServerError(f"HTTP {resp.status_code}: {message or resp.reason_phrase}")

        if not resp.content:
            return None
        return resp.json()


def appointment_from_payload(data: dict[str, Any], salon_id: str | None = None) -> Appointment:
    """Map a backend appointment response onto an Appointment."""
    duration = int(data.get("durationMinutes") or DEFAULT_SERVICE_DURATION)
    start_time = from_24h(data["startTime"])
    end_time = from_24h(data["endTime"]) if data.get("endTime") else add_duration(start_time, duration)
    booked_at = datetime.fromisoformat(data["bookingDate"]) if data.get("bookingDate") else None

    return Appointment(
        id=str(data["id"]),
        number=data.get("appointmentNumber") or data.get("confirmationCode") or str(data["id"]),
        customer=CustomerSummary(
            id=str(data.get("customerId") or data.get("customerEmail") or ""),
            name=data.get("customerName") or "",
            phone=data.get("customerPhone") or "",
            email=data.get("customerEmail") or "",
        ),
        service=ServiceSummary(
            id=str(data.get("serviceId") or ""),
            name=data.get("serviceName") or "",
            price=float(data.get("servicePrice") or 0),
            duration=duration,
        ),
        date=data["appointmentDate"],
        start_time=start_time,
        end_time=end_time,
        status=AppointmentStatus(str(data.get("status") or "PENDING").upper()),
        salon_id=str(data.get("salonId") or salon_id or "") or None,
        staff_id=str(data["staffId"]) if data.get("staffId") else None,
        assigned_staff=data.get("assignedStaff"),
        notes=data.get("notes") or None,
        booked_at=booked_at,
    )


def _error_message(resp: httpx.Response) -> str | None:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or None
    if isinstance(body, dict):
        return body.get("message")
    return None
