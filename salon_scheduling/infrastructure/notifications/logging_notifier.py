from __future__ import annotations

import logging

from salon_scheduling.application.ports.notifications import NotificationPort, RefundPort
from salon_scheduling.domain.entities.appointment import Appointment


class LoggingNotifier(NotificationPort, RefundPort):
    """Logs notification and refund requests instead of delivering them."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def dispatch(self, appointment: Appointment, event: str, email: bool, sms: bool) -> None:
        self._logger.info(
            "WOULD_NOTIFY_CUSTOMER",
            extra={"appointment_id": appointment.id, "action": event, "email": email, "sms": sms},
        )

    def request_refund(self, appointment: Appointment, reason: str) -> None:
        self._logger.info(
            "WOULD_REQUEST_REFUND",
            extra={"appointment_id": appointment.id, "amount": appointment.service.price, "reason": reason},
        )
