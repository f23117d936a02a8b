from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduling.application.dto.booking_request import CreateBookingRequest
from salon_scheduling.domain.entities.appointment import Appointment


class BookingPort(ABC):
    @abstractmethod
    def create_booking(self, request: CreateBookingRequest) -> Appointment:
        """Reserve the slot and create a PENDING appointment.

        Raises InvalidRequest, SlotConflict, ServerError or NetworkError.
        """
        raise NotImplementedError
