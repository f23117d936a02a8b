from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date as date_type
from datetime import datetime
from typing import Callable, Iterable
from zoneinfo import ZoneInfo

from salon_scheduling.application.exceptions import InvalidRequest, InvalidTransition, SlotConflict
from salon_scheduling.application.ports.appointment_store import AppointmentStorePort
from salon_scheduling.application.ports.notifications import NotificationPort, RefundPort
from salon_scheduling.application.use_cases.appointment_book import AppointmentBook
from salon_scheduling.application.use_cases.availability import AvailabilityResolver
from salon_scheduling.application.utils.time_arithmetic import add_duration, normalize_label
from salon_scheduling.domain.entities.appointment import (
    CANCELLATION_REASONS,
    Appointment,
    AppointmentStatus,
    CancelledBy,
    LifecycleAction,
)

ALLOWED_TRANSITIONS: dict[LifecycleAction, frozenset[AppointmentStatus]] = {
    LifecycleAction.CONFIRM: frozenset({AppointmentStatus.PENDING}),
    LifecycleAction.RESCHEDULE: frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}),
    LifecycleAction.CANCEL: frozenset({AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED}),
    LifecycleAction.COMPLETE: frozenset({AppointmentStatus.CONFIRMED}),
    LifecycleAction.MARK_NO_SHOW: frozenset({AppointmentStatus.CONFIRMED}),
}


@dataclass(frozen=True)
class TransitionResult:
    appointment: Appointment
    action: LifecycleAction
    notify_email: bool = False
    notify_sms: bool = False
    process_refund: bool = False
    reason: str | None = None


def allowed_actions(status: AppointmentStatus) -> frozenset[LifecycleAction]:
    return frozenset(action for action, sources in ALLOWED_TRANSITIONS.items() if status in sources)


def check_transition(appointment: Appointment, action: LifecycleAction) -> None:
    if appointment.status not in ALLOWED_TRANSITIONS[action]:
        raise InvalidTransition(action.value, appointment.status.value)


def confirm(
    appointment: Appointment,
    notify_email: bool = True,
    notify_sms: bool = True,
    assigned_staff: str | None = None,
    salon_notes: str | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    check_transition(appointment, LifecycleAction.CONFIRM)
    updated = replace(
        appointment,
        status=AppointmentStatus.CONFIRMED,
        confirmed_at=now,
        assigned_staff=assigned_staff or appointment.assigned_staff,
        salon_notes=salon_notes if salon_notes is not None else appointment.salon_notes,
    )
    return TransitionResult(
        appointment=updated,
        action=LifecycleAction.CONFIRM,
        notify_email=notify_email,
        notify_sms=notify_sms,
    )


def reschedule(
    appointment: Appointment,
    new_date: str,
    new_time: str,
    booked_slots: Iterable[str],
    reason: str = "",
    notify_customer: bool = True,
    is_bookable: Callable[[str], bool] | None = None,
) -> TransitionResult:
    """Move an appointment to ``new_date`` / ``new_time``, keeping its status.

    ``booked_slots`` is the conflict set for the target date and staff. The
    appointment's own current slot never conflicts with itself.
    """
    check_transition(appointment, LifecycleAction.RESCHEDULE)
    _check_date(new_date)

    target = normalize_label(new_time)
    if is_bookable is not None and not is_bookable(target):
        raise InvalidRequest(f"{target} is not a bookable time")

    taken = {normalize_label(label) for label in booked_slots}
    if new_date == appointment.date:
        taken.discard(normalize_label(appointment.start_time))
    if target in taken:
        raise SlotConflict(f"{target} on {new_date} is already booked")

    updated = replace(
        appointment,
        date=new_date,
        start_time=target,
        end_time=add_duration(target, appointment.service.duration),
    )
    return TransitionResult(
        appointment=updated,
        action=LifecycleAction.RESCHEDULE,
        notify_email=notify_customer,
        notify_sms=notify_customer,
        reason=reason or None,
    )


def cancel(
    appointment: Appointment,
    reason: str,
    notes: str = "",
    process_refund: bool = True,
    notify_customer: bool = True,
    cancelled_by: CancelledBy = CancelledBy.SALON,
    now: datetime | None = None,
) -> TransitionResult:
    check_transition(appointment, LifecycleAction.CANCEL)
    if not reason or not reason.strip():
        raise InvalidRequest("A cancellation reason is required")
    if reason not in CANCELLATION_REASONS:
        raise InvalidRequest(f"Unknown cancellation reason: {reason!r}")

    updated = replace(
        appointment,
        status=AppointmentStatus.CANCELLED,
        cancellation_reason=reason,
        cancellation_notes=notes or None,
        cancelled_by=cancelled_by,
        cancelled_at=now,
        refund_requested=process_refund,
    )
    return TransitionResult(
        appointment=updated,
        action=LifecycleAction.CANCEL,
        notify_email=notify_customer,
        notify_sms=notify_customer,
        process_refund=process_refund,
        reason=reason,
    )


def complete(appointment: Appointment, notes: str | None = None, now: datetime | None = None) -> TransitionResult:
    check_transition(appointment, LifecycleAction.COMPLETE)
    updated = replace(
        appointment,
        status=AppointmentStatus.COMPLETED,
        completed_at=now,
        salon_notes=notes if notes is not None else appointment.salon_notes,
    )
    return TransitionResult(appointment=updated, action=LifecycleAction.COMPLETE)


def mark_no_show(appointment: Appointment) -> TransitionResult:
    check_transition(appointment, LifecycleAction.MARK_NO_SHOW)
    return TransitionResult(
        appointment=replace(appointment, status=AppointmentStatus.NO_SHOW),
        action=LifecycleAction.MARK_NO_SHOW,
    )


def _check_date(value: str) -> None:
    try:
        date_type.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidRequest(f"Invalid date {value!r}, expected YYYY-MM-DD") from e


class AppointmentManager:
    """Applies lifecycle transitions to the appointment book.

    A reschedule reserves its new slot with the backend and frees the old one;
    a cancellation frees its slot. A reservation conflict aborts the transition
    before anything changes. The book is then updated, then the store is
    asked to save (a PersistenceError propagates and the book is not rolled
    back), then notification and refund requests are dispatched without
    waiting for delivery.
    """

    def __init__(
        self,
        book: AppointmentBook,
        store: AppointmentStorePort,
        resolver: AvailabilityResolver,
        notifier: NotificationPort,
        refunds: RefundPort,
        timezone: ZoneInfo,
    ) -> None:
        self._book = book
        self._store = store
        self._resolver = resolver
        self._notifier = notifier
        self._refunds = refunds
        self._timezone = timezone
        self._logger = logging.getLogger(__name__)

    @property
    def book(self) -> AppointmentBook:
        return self._book

    def load(self, salon_id: str | None = None) -> int:
        appointments = self._store.list_appointments(salon_id)
        for appointment in appointments:
            self._book.put(appointment)
        return len(appointments)

    def register(self, appointment: Appointment) -> Appointment:
        """Add a freshly created appointment to the book and persist it."""
        self._book.put(appointment)
        self._store.save_appointment(appointment)
        return appointment

    def confirm(
        self,
        appointment_id: str,
        notify_email: bool = True,
        notify_sms: bool = True,
        assigned_staff: str | None = None,
        salon_notes: str | None = None,
    ) -> Appointment:
        result = confirm(
            self._book.get(appointment_id),
            notify_email=notify_email,
            notify_sms=notify_sms,
            assigned_staff=assigned_staff,
            salon_notes=salon_notes,
            now=self._now(),
        )
        return self._apply(result)

    def reschedule(
        self,
        appointment_id: str,
        new_date: str,
        new_time: str,
        reason: str = "",
        notify_customer: bool = True,
    ) -> Appointment:
        appointment = self._book.get(appointment_id)
        check_transition(appointment, LifecycleAction.RESCHEDULE)
        if appointment.salon_id is None:
            raise InvalidRequest(f"Appointment {appointment_id} has no salon to check availability against")

        booked = self._resolver.booked_labels(appointment.salon_id, new_date, appointment.staff_id)
        booked |= self._held_by_others(appointment, new_date)
        result = reschedule(
            appointment,
            new_date,
            new_time,
            booked,
            reason=reason,
            notify_customer=notify_customer,
            is_bookable=self._resolver.is_bookable,
        )
        return self._apply(result, previous=appointment)

    def cancel(
        self,
        appointment_id: str,
        reason: str,
        notes: str = "",
        process_refund: bool = True,
        notify_customer: bool = True,
        cancelled_by: CancelledBy = CancelledBy.SALON,
    ) -> Appointment:
        appointment = self._book.get(appointment_id)
        result = cancel(
            appointment,
            reason,
            notes=notes,
            process_refund=process_refund,
            notify_customer=notify_customer,
            cancelled_by=cancelled_by,
            now=self._now(),
        )
        return self._apply(result, previous=appointment)

    def complete(self, appointment_id: str, notes: str | None = None) -> Appointment:
        return self._apply(complete(self._book.get(appointment_id), notes=notes, now=self._now()))

    def mark_no_show(self, appointment_id: str) -> Appointment:
        return self._apply(mark_no_show(self._book.get(appointment_id)))

    def _held_by_others(self, appointment: Appointment, new_date: str) -> set[str]:
        """Start labels of other active appointments for the same staff on ``new_date``."""
        return {
            normalize_label(other.start_time)
            for other in self._book.snapshot(appointment.salon_id)
            if other.id != appointment.id
            and not other.status.is_terminal
            and other.date == new_date
            and other.staff_id == appointment.staff_id
        }

    def _sync_slots(self, previous: Appointment, result: TransitionResult) -> None:
        """Reserve the new slot of a move, then free the slot the appointment left."""
        current = result.appointment
        if previous.salon_id is None:
            return
        if result.action == LifecycleAction.RESCHEDULE:
            old_slot = (previous.date, normalize_label(previous.start_time))
            if old_slot == (current.date, current.start_time):
                return
            self._resolver.reserve(current.salon_id, current.date, current.start_time, current.staff_id)
        self._resolver.release(previous.salon_id, previous.date, previous.start_time, previous.staff_id)

    def _apply(self, result: TransitionResult, previous: Appointment | None = None) -> Appointment:
        appointment = result.appointment
        if previous is not None:
            self._sync_slots(previous, result)
        self._book.put(appointment)
        self._logger.info(
            "Appointment transition applied",
            extra={
                "appointment_id": appointment.id,
                "action": result.action.value,
                "status": appointment.status.value,
                "reason": result.reason,
            },
        )
        self._store.save_appointment(appointment)
        self._dispatch_side_effects(result)
        return appointment

    def _dispatch_side_effects(self, result: TransitionResult) -> None:
        appointment = result.appointment
        if result.notify_email or result.notify_sms:
            try:
                self._notifier.dispatch(appointment, result.action.value, result.notify_email, result.notify_sms)
            except Exception as e:
                self._logger.exception(
                    "Notification request failed",
                    extra={"appointment_id": appointment.id, "action": result.action.value, "error": str(e)},
                )
        if result.process_refund:
            try:
                self._refunds.request_refund(appointment, result.reason or "")
            except Exception as e:
                self._logger.exception(
                    "Refund request failed",
                    extra={"appointment_id": appointment.id, "error": str(e)},
                )

    def _now(self) -> datetime:
        return datetime.now(self._timezone)
