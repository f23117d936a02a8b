from __future__ import annotations

from typing import Iterable

from salon_scheduling.application.exceptions import NotFound
from salon_scheduling.domain.entities.appointment import Appointment


class AppointmentBook:
    """In-memory collection of appointments keyed by id, in insertion order."""

    def __init__(self, appointments: Iterable[Appointment] = ()) -> None:
        self._appointments: dict[str, Appointment] = {}
        for appointment in appointments:
            self.put(appointment)

    def __len__(self) -> int:
        return len(self._appointments)

    def __contains__(self, appointment_id: object) -> bool:
        return appointment_id in self._appointments

    def get(self, appointment_id: str) -> Appointment:
        try:
            return self._appointments[appointment_id]
        except KeyError:
            raise NotFound(f"Appointment {appointment_id} not found") from None

    def put(self, appointment: Appointment) -> None:
        self._appointments[appointment.id] = appointment

    def snapshot(self, salon_id: str | None = None) -> list[Appointment]:
        return [
            appointment
            for appointment in self._appointments.values()
            if salon_id is None or appointment.salon_id == salon_id
        ]
