from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduling.domain.entities.appointment import Appointment


class NotificationPort(ABC):
    @abstractmethod
    def dispatch(self, appointment: Appointment, event: str, email: bool, sms: bool) -> None:
        """Request a customer notification. Delivery is not awaited."""
        raise NotImplementedError


class RefundPort(ABC):
    @abstractmethod
    def request_refund(self, appointment: Appointment, reason: str) -> None:
        """Request a refund for a cancelled appointment. Processing is not awaited."""
        raise NotImplementedError
