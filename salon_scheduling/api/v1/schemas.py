from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from salon_scheduling.application.use_cases.appointment_lifecycle import allowed_actions
from salon_scheduling.domain.entities.appointment import Appointment, AppointmentStatus, CancelledBy
from salon_scheduling.domain.entities.time_slot import TimeSlot


class CustomerInfoSchema(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    is_first_time: bool = False


class BookingRequestSchema(BaseModel):
    service_id: str
    staff_id: str
    date: str
    time: str
    time_slot_id: str | None = None
    customer: CustomerInfoSchema
    special_requests: str = ""


class ConfirmRequestSchema(BaseModel):
    notify_email: bool = True
    notify_sms: bool = True
    assigned_staff: str | None = None
    salon_notes: str | None = None


class RescheduleRequestSchema(BaseModel):
    new_date: str
    new_time: str
    reason: str = ""
    notify_customer: bool = True


class CancelRequestSchema(BaseModel):
    reason: str
    notes: str = ""
    process_refund: bool = True
    notify_customer: bool = True
    cancelled_by: CancelledBy = CancelledBy.SALON


class CompleteRequestSchema(BaseModel):
    notes: str | None = None


class TimeSlotSchema(BaseModel):
    date: str
    time: str
    end_time: str | None = None
    available: bool
    staff_id: str
    popular: bool = False
    last_spot: bool = False
    slot_id: str | None = None

    @classmethod
    def from_entity(cls, slot: TimeSlot) -> "TimeSlotSchema":
        return cls(
            date=slot.date,
            time=slot.time,
            end_time=slot.end_time,
            available=slot.available,
            staff_id=slot.staff_id,
            popular=slot.popular,
            last_spot=slot.last_spot,
            slot_id=slot.slot_id,
        )


class AvailabilityResponseSchema(BaseModel):
    date: str
    slots: list[TimeSlotSchema]
    bands: dict[str, list[TimeSlotSchema]] = Field(default_factory=dict)


class CustomerSummarySchema(BaseModel):
    id: str
    name: str
    phone: str
    email: str


class ServiceSummarySchema(BaseModel):
    id: str
    name: str
    price: float
    duration: int


class AppointmentSchema(BaseModel):
    id: str
    number: str
    customer: CustomerSummarySchema
    service: ServiceSummarySchema
    date: str
    start_time: str
    end_time: str
    status: AppointmentStatus
    status_label: str
    allowed_actions: list[str]
    salon_id: str | None = None
    assigned_staff: str | None = None
    notes: str | None = None
    salon_notes: str | None = None
    booked_at: datetime | None = None
    cancellation_reason: str | None = None
    cancellation_notes: str | None = None
    cancelled_by: CancelledBy | None = None
    refund_requested: bool = False

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentSchema":
        return cls(
            id=appointment.id,
            number=appointment.number,
            customer=CustomerSummarySchema(
                id=appointment.customer.id,
                name=appointment.customer.name,
                phone=appointment.customer.phone,
                email=appointment.customer.email,
            ),
            service=ServiceSummarySchema(
                id=appointment.service.id,
                name=appointment.service.name,
                price=appointment.service.price,
                duration=appointment.service.duration,
            ),
            date=appointment.date,
            start_time=appointment.start_time,
            end_time=appointment.end_time,
            status=appointment.status,
            status_label=appointment.status.label,
            allowed_actions=sorted(action.value for action in allowed_actions(appointment.status)),
            salon_id=appointment.salon_id,
            assigned_staff=appointment.assigned_staff,
            notes=appointment.notes,
            salon_notes=appointment.salon_notes,
            booked_at=appointment.booked_at,
            cancellation_reason=appointment.cancellation_reason,
            cancellation_notes=appointment.cancellation_notes,
            cancelled_by=appointment.cancelled_by,
            refund_requested=appointment.refund_requested,
        )


class AppointmentPageSchema(BaseModel):
    items: list[AppointmentSchema]
    page: int
    size: int
    total_items: int
    total_pages: int


class SummarySchema(BaseModel):
    total_count: int
    today_count: int
    status_counts: dict[str, int]
    total_revenue: float
    today_revenue: float
