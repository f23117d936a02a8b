from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from salon_scheduling.application.use_cases.appointment_book import AppointmentBook
from salon_scheduling.application.use_cases.appointment_lifecycle import AppointmentManager
from salon_scheduling.application.use_cases.availability import AvailabilityResolver
from salon_scheduling.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    CustomerSummary,
    ServiceSummary,
)
from salon_scheduling.infrastructure.notifications.logging_notifier import LoggingNotifier
from salon_scheduling.infrastructure.salon_api.mock_backend import DEMO_SALON_ID, MockSalonBackend
from salon_scheduling.infrastructure.store.memory_store import MemoryAppointmentStore

UTC = ZoneInfo("UTC")


def _appointment(number, customer, service, date, start, end, status, notes=None, reason=None) -> Appointment:
    return Appointment(
        id=number.lstrip("#").lower(),
        number=number,
        customer=CustomerSummary(*customer),
        service=ServiceSummary(*service),
        date=date,
        start_time=start,
        end_time=end,
        status=status,
        salon_id=DEMO_SALON_ID,
        notes=notes,
        booked_at=datetime(2025, 10, 1, 9, int(number[-1]), tzinfo=UTC),
        cancellation_reason=reason,
    )


@pytest.fixture
def sample_appointments() -> list[Appointment]:
    """Five dashboard appointments, APT001..APT005."""
    return [
        _appointment(
            "#APT001",
            ("c1", "Sarah Johnson", "+94771234567", "sarah.johnson@gmail.com"),
            ("s1", "Men's Haircut", 1500, 30),
            "2025-10-11", "9:00 AM", "9:30 AM",
            AppointmentStatus.CONFIRMED,
            notes="Regular customer, prefers stylist Priya",
        ),
        _appointment(
            "#APT002",
            ("c2", "Priya Fernando", "+94772345678", "priya.fernando@gmail.com"),
            ("s2", "Women's Haircut", 2500, 60),
            "2025-10-11", "10:00 AM", "11:00 AM",
            AppointmentStatus.PENDING,
            notes="First time customer",
        ),
        _appointment(
            "#APT003",
            ("c3", "Mike Williams", "+94773456789", "mike.w@gmail.com"),
            ("s3", "Beard Trim", 800, 30),
            "2025-10-11", "11:00 AM", "11:30 AM",
            AppointmentStatus.CANCELLED,
            reason="Customer requested",
        ),
        _appointment(
            "#APT004",
            ("c4", "Kumari Silva", "+94774567890", "kumari.silva@gmail.com"),
            ("s4", "Hair Coloring", 3500, 90),
            "2025-10-11", "2:00 PM", "3:30 PM",
            AppointmentStatus.CONFIRMED,
            notes="Wants auburn color",
        ),
        _appointment(
            "#APT005",
            ("c5", "David Chen", "+94775678901", "david.chen@gmail.com"),
            ("s5", "Hair Treatment", 2000, 45),
            "2025-10-12", "10:00 AM", "10:45 AM",
            AppointmentStatus.PENDING,
            notes="Scalp treatment needed",
        ),
    ]


@pytest.fixture
def backend() -> MockSalonBackend:
    return MockSalonBackend(timezone=UTC)


@pytest.fixture
def resolver(backend: MockSalonBackend) -> AvailabilityResolver:
    return AvailabilityResolver(catalog=backend, availability=backend)


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def manager(sample_appointments, resolver, notifier) -> AppointmentManager:
    return AppointmentManager(
        book=AppointmentBook(sample_appointments),
        store=MemoryAppointmentStore(),
        resolver=resolver,
        notifier=notifier,
        refunds=notifier,
        timezone=UTC,
    )
