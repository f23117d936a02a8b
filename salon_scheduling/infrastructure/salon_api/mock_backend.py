from __future__ import annotations

import logging
import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

from salon_scheduling.application.dto.booking_request import CreateBookingRequest
from salon_scheduling.application.exceptions import InvalidRequest, NotFound, SlotConflict
from salon_scheduling.application.ports.availability import AvailabilityPort
from salon_scheduling.application.ports.booking import BookingPort
from salon_scheduling.application.ports.catalog import CatalogPort
from salon_scheduling.application.utils.time_arithmetic import add_duration, normalize_label
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, CustomerSummary, ServiceSummary
from salon_scheduling.domain.entities.catalog import ANY_STAFF_ID, Service, StaffMember, find_service

DEMO_SALON_ID = "1"

DEMO_SERVICES = (
    Service(id="1", name="Women's Haircut & Style", category="Haircut", duration=60, price=65),
    Service(id="2", name="Full Color & Highlights", category="Coloring", duration=180, price=150),
    Service(id="3", name="Balayage", category="Coloring", duration=240, price=200),
    Service(id="4", name="Keratin Treatment", category="Treatments", duration=120, price=120),
    Service(id="5", name="Special Event Styling", category="Styling", duration=90, price=85),
)

DEMO_STAFF = (
    StaffMember(id="1", name="Sarah Martinez", role="Senior Stylist"),
    StaffMember(id="2", name="Michael Chen", role="Master Stylist"),
    StaffMember(id="3", name="Emma Thompson", role="Style Director"),
)


class MockSalonBackend(CatalogPort, AvailabilityPort, BookingPort):
    """In-process salon backend for development and tests.

    Holds one catalog per salon and a booked set per (salon, date, staff).
    """

    def __init__(
        self,
        catalogs: dict[str, tuple[tuple[Service, ...], tuple[StaffMember, ...]]] | None = None,
        timezone: ZoneInfo | None = None,
    ) -> None:
        self._catalogs = catalogs if catalogs is not None else {DEMO_SALON_ID: (DEMO_SERVICES, DEMO_STAFF)}
        self._booked: dict[tuple[str, str, str], set[str]] = {}
        self._timezone = timezone or ZoneInfo("UTC")
        self._counter = 0
        self._logger = logging.getLogger(__name__)

    def list_services(self, salon_id: str) -> list[Service]:
        return list(self._catalog(salon_id)[0])

    def list_staff(self, salon_id: str) -> list[StaffMember]:
        return list(self._catalog(salon_id)[1])

    def list_booked_slots(self, salon_id: str, date: str, staff_id: str | None = None) -> set[str]:
        self._catalog(salon_id)
        if staff_id not in (None, ANY_STAFF_ID):
            return set(self._booked.get((salon_id, date, staff_id), set()))

        staff_ids = self._staff_ids(salon_id)
        if not staff_ids:
            return set(self._booked.get((salon_id, date, ANY_STAFF_ID), set()))
        # salon-wide, a label is taken only when nobody is free
        per_staff = [self._booked.get((salon_id, date, sid), set()) for sid in staff_ids]
        return set.intersection(*per_staff)

    def reserve_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        self._catalog(salon_id)
        label = normalize_label(label)
        taken = self._booked.setdefault((salon_id, date, staff_id or ANY_STAFF_ID), set())
        if label in taken:
            raise SlotConflict(f"{label} on {date} is already booked")
        taken.add(label)

    def release_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        self._booked.get((salon_id, date, staff_id or ANY_STAFF_ID), set()).discard(normalize_label(label))

    def create_booking(self, request: CreateBookingRequest) -> Appointment:
        services, _ = self._catalog(request.salon_id)
        service = find_service(services, request.service_id)
        if service is None:
            raise InvalidRequest(f"Unknown service {request.service_id}")

        staff_id = self._reserve(request.salon_id, request.date, request.time, request.staff_id)
        staff_name = next(
            (member.name for member in self.list_staff(request.salon_id) if member.id == staff_id),
            None,
        )

        self._counter += 1
        appointment = Appointment(
            id=uuid.uuid4().hex,
            number=f"#APT{self._counter:03d}",
            customer=CustomerSummary(
                id=request.customer.email,
                name=request.customer.full_name,
                phone=request.customer.phone,
                email=request.customer.email,
            ),
            service=ServiceSummary(id=service.id, name=service.name, price=service.price, duration=service.duration),
            date=request.date,
            start_time=request.time,
            end_time=add_duration(request.time, service.duration),
            status=AppointmentStatus.PENDING,
            salon_id=request.salon_id,
            staff_id=staff_id if staff_id != ANY_STAFF_ID else None,
            assigned_staff=staff_name,
            notes=request.special_requests or None,
            booked_at=datetime.now(self._timezone),
        )
        self._logger.info(
            "Mock booking created",
            extra={"appointment_id": appointment.id, "salon_id": request.salon_id, "slot_time": request.time},
        )
        return appointment

    def _reserve(self, salon_id: str, date: str, label: str, staff_id: str) -> str:
        label = normalize_label(label)
        staff_ids = self._staff_ids(salon_id)

        if staff_id == ANY_STAFF_ID:
            candidates = staff_ids or [ANY_STAFF_ID]
        elif staff_id in staff_ids:
            candidates = [staff_id]
        else:
            raise InvalidRequest(f"Unknown staff member {staff_id}")

        for candidate in candidates:
            taken = self._booked.setdefault((salon_id, date, candidate), set())
            if label not in taken:
                taken.add(label)
                return candidate
        raise SlotConflict("This time slot is no longer available")

    def _staff_ids(self, salon_id: str) -> list[str]:
        return [member.id for member in self._catalog(salon_id)[1] if member.available and not member.is_any]

    def _catalog(self, salon_id: str) -> tuple[tuple[Service, ...], tuple[StaffMember, ...]]:
        try:
            return self._catalogs[salon_id]
        except KeyError:
            raise NotFound(f"Salon {salon_id} not found") from None
