from __future__ import annotations

import logging
from datetime import date as date_type
from typing import Iterable

from salon_scheduling.application.exceptions import InvalidRequest, NotFound
from salon_scheduling.application.ports.availability import AvailabilityPort
from salon_scheduling.application.ports.catalog import CatalogPort
from salon_scheduling.application.utils.time_arithmetic import add_duration, hour_of, normalize_label, to_label, to_minutes
from salon_scheduling.core.config import Settings
from salon_scheduling.domain.entities.catalog import ANY_STAFF_ID, find_service
from salon_scheduling.domain.entities.time_slot import SlotBand, SlotGrid, TimeSlot

POPULAR_BAND_OCCUPANCY = 0.5


def grid_from_settings(settings: Settings) -> SlotGrid:
    blackout_start = to_minutes(settings.LUNCH_BREAK_START) if settings.LUNCH_BREAK_START else None
    blackout_end = to_minutes(settings.LUNCH_BREAK_END) if settings.LUNCH_BREAK_END else None
    end_minutes = to_minutes(settings.SLOT_GRID_END)
    if end_minutes == 0:
        # "12:00 AM" as a grid end means midnight at the end of the day
        end_minutes = 24 * 60
    return SlotGrid(
        start_minutes=to_minutes(settings.SLOT_GRID_START),
        end_minutes=end_minutes,
        increment_minutes=settings.SLOT_INCREMENT_MINUTES,
        blackout_start=blackout_start,
        blackout_end=blackout_end,
    )


class AvailabilityResolver:
    def __init__(self, catalog: CatalogPort, availability: AvailabilityPort, grid: SlotGrid | None = None) -> None:
        self._catalog = catalog
        self._availability = availability
        self._grid = grid or SlotGrid()
        self._logger = logging.getLogger(__name__)

    @property
    def grid(self) -> SlotGrid:
        return self._grid

    def grid_labels(self) -> list[str]:
        return [to_label(minutes) for minutes in self._grid.start_times()]

    def is_bookable(self, label: str) -> bool:
        """True if ``label`` is a start time on the grid (outside the lunch break)."""
        return self._grid.contains(to_minutes(label))

    def booked_labels(self, salon_id: str, date: str, staff_id: str | None = None) -> set[str]:
        """Normalized booked set for a date, per staff (or salon-wide for None / "any")."""
        _check_date(date)
        lookup_staff = None if staff_id in (None, ANY_STAFF_ID) else staff_id
        raw = self._availability.list_booked_slots(salon_id, date, lookup_staff)
        return {normalize_label(label) for label in raw}

    def reserve(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        self._availability.reserve_slot(salon_id, date, normalize_label(label), staff_id)

    def release(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        self._availability.release_slot(salon_id, date, normalize_label(label), staff_id)

    def resolve(
        self,
        salon_id: str,
        date: str,
        staff_id: str | None = None,
        service_id: str | None = None,
    ) -> list[TimeSlot]:
        """Time slots for ``date``, ordered by start time then staff.

        A specific ``staff_id`` yields one series. None or the "any" sentinel
        yields one series per available staff member, never merged.
        """
        _check_date(date)

        duration = None
        if service_id is not None:
            service = find_service(self._catalog.list_services(salon_id), service_id)
            if service is None:
                raise NotFound(f"Service {service_id} not found for salon {salon_id}")
            duration = service.duration

        if staff_id not in (None, ANY_STAFF_ID):
            series = {staff_id: self.booked_labels(salon_id, date, staff_id)}
        else:
            staff = [member for member in self._catalog.list_staff(salon_id) if member.available and not member.is_any]
            if staff:
                series = {member.id: self.booked_labels(salon_id, date, member.id) for member in staff}
            else:
                series = {ANY_STAFF_ID: self.booked_labels(salon_id, date, None)}

        per_staff = {
            sid: self._build_series(date, sid, booked, duration) for sid, booked in series.items()
        }

        slots: list[TimeSlot] = []
        labels = self.grid_labels()
        for index in range(len(labels)):
            for sid in series:
                slots.append(per_staff[sid][index])

        self._logger.info(
            "Availability resolved",
            extra={
                "salon_id": salon_id,
                "date": date,
                "staff_count": len(series),
                "available": sum(1 for slot in slots if slot.available),
            },
        )
        return slots

    def _build_series(self, date: str, staff_id: str, booked: set[str], duration: int | None) -> list[TimeSlot]:
        labels = self.grid_labels()
        available = {label: label not in booked for label in labels}

        band_labels: dict[SlotBand, list[str]] = {}
        for label in labels:
            band_labels.setdefault(SlotBand.for_hour(hour_of(label)), []).append(label)

        series: list[TimeSlot] = []
        for label in labels:
            members = band_labels[SlotBand.for_hour(hour_of(label))]
            open_count = sum(1 for member in members if available[member])
            booked_share = (len(members) - open_count) / len(members)
            is_open = available[label]
            last_spot = is_open and open_count == 1
            popular = is_open and not last_spot and booked_share >= POPULAR_BAND_OCCUPANCY
            series.append(
                TimeSlot(
                    date=date,
                    time=label,
                    available=is_open,
                    staff_id=staff_id,
                    popular=popular,
                    last_spot=last_spot,
                    end_time=add_duration(label, duration) if duration else None,
                )
            )
        return series


def group_by_band(slots: Iterable[TimeSlot]) -> dict[SlotBand, list[TimeSlot]]:
    """Display grouping into Morning / Afternoon / Evening, in band order."""
    grouped: dict[SlotBand, list[TimeSlot]] = {band: [] for band in SlotBand}
    for slot in slots:
        grouped[SlotBand.for_hour(hour_of(slot.time))].append(slot)
    return grouped


def is_available_at(slots: Iterable[TimeSlot], label: str, staff_id: str) -> bool:
    """Whether ``staff_id`` can take ``label``; the "any" sentinel needs one free staff member."""
    target = normalize_label(label)
    for slot in slots:
        if normalize_label(slot.time) != target or not slot.available:
            continue
        if staff_id == ANY_STAFF_ID or slot.staff_id == staff_id:
            return True
    return False


def _check_date(value: str) -> None:
    try:
        date_type.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidRequest(f"Invalid date {value!r}, expected YYYY-MM-DD") from e
