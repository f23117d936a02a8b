from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATUSES

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_TERMINAL_STATUSES = frozenset(
    {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
)

_STATUS_LABELS = {
    AppointmentStatus.PENDING: "Pending",
    AppointmentStatus.CONFIRMED: "Confirmed",
    AppointmentStatus.COMPLETED: "Completed",
    AppointmentStatus.CANCELLED: "Cancelled",
    AppointmentStatus.NO_SHOW: "No Show",
}


class LifecycleAction(str, Enum):
    CONFIRM = "confirm"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"
    COMPLETE = "complete"
    MARK_NO_SHOW = "mark_no_show"


class CancelledBy(str, Enum):
    SALON = "SALON"
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


OTHER_CANCELLATION_REASON = "Other"

CANCELLATION_REASONS: tuple[str, ...] = (
    "Customer requested",
    "Salon closure",
    "Staff unavailable",
    "Emergency",
    "Double booking",
    "Customer no-show",
    OTHER_CANCELLATION_REASON,
)


@dataclass(frozen=True)
class CustomerSummary:
    id: str
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class ServiceSummary:
    id: str
    name: str
    price: float
    duration: int  # minutes


@dataclass(frozen=True)
class Appointment:
    id: str
    number: str  # e.g. "#APT001"
    customer: CustomerSummary
    service: ServiceSummary
    date: str  # YYYY-MM-DD
    start_time: str  # 12-hour label
    end_time: str
    status: AppointmentStatus = AppointmentStatus.PENDING
    salon_id: str | None = None
    staff_id: str | None = None
    assigned_staff: str | None = None
    notes: str | None = None
    salon_notes: str | None = None
    booked_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    cancellation_notes: str | None = None
    cancelled_by: CancelledBy | None = None
    refund_requested: bool = False
