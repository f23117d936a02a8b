from __future__ import annotations

from salon_scheduling.application.ports.appointment_store import AppointmentStorePort
from salon_scheduling.domain.entities.appointment import Appointment


class MemoryAppointmentStore(AppointmentStorePort):
    def __init__(self) -> None:
        self._appointments: dict[str, Appointment] = {}

    def save_appointment(self, appointment: Appointment) -> None:
        self._appointments[appointment.id] = appointment

    def list_appointments(self, salon_id: str | None = None) -> list[Appointment]:
        return [
            appointment
            for appointment in self._appointments.values()
            if salon_id is None or appointment.salon_id == salon_id
        ]
