from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduling.domain.entities.appointment import Appointment


class AppointmentStorePort(ABC):
    @abstractmethod
    def save_appointment(self, appointment: Appointment) -> None:
        """Persist an appointment. Raises PersistenceError on failure."""
        raise NotImplementedError

    @abstractmethod
    def list_appointments(self, salon_id: str | None = None) -> list[Appointment]:
        raise NotImplementedError
