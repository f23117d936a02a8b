from __future__ import annotations

import csv
import io
import math
from datetime import date, timedelta
from typing import Iterable, Sequence, TypeVar

from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus
from salon_scheduling.domain.entities.query import AppointmentStatistics, FilterCriteria, Page

T = TypeVar("T")

CSV_HEADER = ("id", "number", "customer", "service", "date", "time", "status", "price")
_UNBILLED_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})


def matches(appointment: Appointment, criteria: FilterCriteria) -> bool:
    if criteria.start_date and appointment.date < criteria.start_date:
        return False
    if criteria.end_date and appointment.date > criteria.end_date:
        return False
    if criteria.statuses and appointment.status not in criteria.statuses:
        return False
    if criteria.search:
        needle = criteria.search.lower()
        haystack = (
            appointment.customer.name,
            appointment.customer.phone,
            appointment.customer.email,
            appointment.number,
        )
        if not any(needle in (value or "").lower() for value in haystack):
            return False
    if criteria.service_id and appointment.service.id != criteria.service_id:
        return False
    return True


def filter_appointments(appointments: Iterable[Appointment], criteria: FilterCriteria) -> list[Appointment]:
    """Appointments matching every criterion, in their original order."""
    return [appointment for appointment in appointments if matches(appointment, criteria)]


def paginate(items: Sequence[T], page_size: int, page_number: int) -> Page[T]:
    """1-based page of ``items``; there is always at least one (possibly empty) page."""
    if page_size < 1:
        raise ValueError(f"page_size must be at least 1, got {page_size}")
    if page_number < 1:
        raise ValueError(f"page_number must be at least 1, got {page_number}")

    total_items = len(items)
    start = (page_number - 1) * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page_number=page_number,
        page_size=page_size,
        total_items=total_items,
        total_pages=max(1, math.ceil(total_items / page_size)),
    )


def default_criteria(today: date, window_days: int = 7) -> FilterCriteria:
    """The dashboard's opening window: today through ``window_days`` ahead."""
    return FilterCriteria(
        start_date=today.isoformat(),
        end_date=(today + timedelta(days=window_days)).isoformat(),
    )


def summarize(appointments: Iterable[Appointment], today: str) -> AppointmentStatistics:
    counts = {status: 0 for status in AppointmentStatus}
    total = today_count = 0
    revenue = today_revenue = 0.0

    for appointment in appointments:
        total += 1
        counts[appointment.status] += 1
        billed = appointment.status not in _UNBILLED_STATUSES
        if billed:
            revenue += appointment.service.price
        if appointment.date == today:
            today_count += 1
            if billed:
                today_revenue += appointment.service.price

    return AppointmentStatistics(
        total_count=total,
        today_count=today_count,
        status_counts=counts,
        total_revenue=revenue,
        today_revenue=today_revenue,
    )


def export_csv(appointments: Iterable[Appointment]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for appointment in appointments:
        writer.writerow(
            (
                appointment.id,
                appointment.number,
                appointment.customer.name,
                appointment.service.name,
                appointment.date,
                appointment.start_time,
                appointment.status.value,
                appointment.service.price,
            )
        )
    return buffer.getvalue()
