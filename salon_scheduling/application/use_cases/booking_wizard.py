from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from salon_scheduling.application.dto.booking_request import CreateBookingRequest
from salon_scheduling.application.exceptions import (
    InvalidRequest,
    InvalidTransition,
    NetworkError,
    SlotConflict,
    StepIncomplete,
)
from salon_scheduling.application.ports.booking import BookingPort
from salon_scheduling.application.ports.catalog import CatalogPort
from salon_scheduling.application.use_cases.availability import AvailabilityResolver
from salon_scheduling.application.utils.time_arithmetic import normalize_label
from salon_scheduling.domain.entities.appointment import Appointment
from salon_scheduling.domain.entities.booking_draft import BookingDraft, BookingStep, CustomerInfo
from salon_scheduling.domain.entities.catalog import ANY_STAFF, ANY_STAFF_ID, Service, StaffMember, find_service
from salon_scheduling.domain.entities.time_slot import TimeSlot

_EDITABLE_FIELDS = frozenset(f.name for f in fields(BookingDraft)) - {"salon_id", "total_price"}
_CUSTOMER_FIELDS = ("first_name", "last_name", "email", "phone")


@dataclass(frozen=True)
class BookingWizard:
    """Customer booking flow: SERVICE -> STAFF -> DATETIME -> CUSTOMER_INFO -> CONFIRMATION.

    Every transition returns a new wizard; the current one is never changed.
    """

    draft: BookingDraft
    step: BookingStep = BookingStep.SERVICE
    services: tuple[Service, ...] = field(default=(), repr=False)
    submitted: bool = False

    @classmethod
    def open(cls, salon_id: str, services: list[Service] | tuple[Service, ...] = ()) -> "BookingWizard":
        return cls(draft=BookingDraft(salon_id=salon_id), services=tuple(services))

    @property
    def selected_service(self) -> Service | None:
        return find_service(self.services, self.draft.service_id)

    def missing_fields(self, step: BookingStep | None = None) -> tuple[str, ...]:
        """Fields that keep ``step`` (default: the current step) from advancing."""
        step = self.step if step is None else step
        draft = self.draft

        if step == BookingStep.SERVICE:
            return () if draft.service_id is not None else ("service_id",)
        if step == BookingStep.STAFF:
            return () if draft.staff_id is not None else ("staff_id",)
        if step == BookingStep.DATETIME:
            return tuple(name for name in ("date", "time") if getattr(draft, name) is None)
        if step == BookingStep.CUSTOMER_INFO:
            return tuple(
                f"customer_info.{name}"
                for name in _CUSTOMER_FIELDS
                if not (getattr(draft.customer_info, name) or "").strip()
            )
        return ()

    def can_advance(self) -> bool:
        return self.step < BookingStep.CONFIRMATION and not self.missing_fields()

    def advance(self) -> "BookingWizard":
        if self.step == BookingStep.CONFIRMATION:
            raise StepIncomplete(self.step.name, ())
        missing = self.missing_fields()
        if missing:
            raise StepIncomplete(self.step.name, missing)
        return replace(self, step=BookingStep(self.step + 1))

    def retreat(self) -> "BookingWizard":
        if self.step == BookingStep.SERVICE:
            raise InvalidTransition("go back", self.step.name)
        return replace(self, step=BookingStep(self.step - 1))

    def update_draft(self, **changes: Any) -> "BookingWizard":
        """Merge draft fields without changing step.

        ``customer_info`` may be a partial mapping merged into the current record.
        Changing ``service_id`` recomputes ``total_price``.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown draft field(s): {', '.join(sorted(unknown))}")

        if "customer_info" in changes:
            changes["customer_info"] = _merge_customer_info(self.draft.customer_info, changes["customer_info"])

        draft = replace(self.draft, **changes)
        if "service_id" in changes:
            service = find_service(self.services, draft.service_id)
            draft = replace(draft, total_price=service.price if service else 0)
        return replace(self, draft=draft)

    def select_slot(self, slot: TimeSlot) -> "BookingWizard":
        if not slot.available:
            raise SlotConflict(f"{slot.time} on {slot.date} is no longer available")
        return self.update_draft(date=slot.date, time=slot.time, time_slot_id=slot.slot_id)

    def missing_for_finalize(self) -> tuple[str, ...]:
        missing: list[str] = []
        for step in (BookingStep.SERVICE, BookingStep.STAFF, BookingStep.DATETIME, BookingStep.CUSTOMER_INFO):
            missing.extend(self.missing_fields(step))
        return tuple(missing)


def _merge_customer_info(current: CustomerInfo, update: CustomerInfo | Mapping[str, Any]) -> CustomerInfo:
    if isinstance(update, CustomerInfo):
        return update
    return replace(current, **dict(update))


@dataclass(frozen=True)
class BookingResult:
    appointment: Appointment
    wizard: BookingWizard


class BookingUseCase:
    def __init__(self, catalog: CatalogPort, resolver: AvailabilityResolver, booking: BookingPort) -> None:
        self._catalog = catalog
        self._resolver = resolver
        self._booking = booking
        self._logger = logging.getLogger(__name__)

    def open_wizard(self, salon_id: str) -> BookingWizard:
        return BookingWizard.open(salon_id, self._catalog.list_services(salon_id))

    def list_staff(self, salon_id: str) -> list[StaffMember]:
        """Staff choices for the STAFF step, led by the "any available" sentinel."""
        return [ANY_STAFF] + [member for member in self._catalog.list_staff(salon_id) if not member.is_any]

    def load_availability(self, wizard: BookingWizard, date: str) -> list[TimeSlot]:
        draft = wizard.draft
        return self._resolver.resolve(draft.salon_id, date, staff_id=draft.staff_id, service_id=draft.service_id)

    def find_slot(self, wizard: BookingWizard, date: str, label: str) -> TimeSlot:
        """The open slot at ``label`` for the draft's staff choice."""
        label = normalize_label(label)
        if not self._resolver.is_bookable(label):
            raise InvalidRequest(f"{label} is not a bookable time")

        staff_id = wizard.draft.staff_id
        for slot in self.load_availability(wizard, date):
            if slot.time != label or not slot.available:
                continue
            if staff_id in (None, ANY_STAFF_ID) or slot.staff_id == staff_id:
                return slot
        raise SlotConflict(f"{label} on {date} is not available")

    def finalize(self, wizard: BookingWizard) -> BookingResult:
        """Submit a draft that reached CONFIRMATION. The draft can be submitted once."""
        if wizard.submitted:
            raise InvalidRequest("Booking draft was already submitted")

        missing = wizard.missing_for_finalize()
        if missing:
            raise StepIncomplete(wizard.step.name, missing)
        if wizard.step != BookingStep.CONFIRMATION:
            raise StepIncomplete(wizard.step.name, ("confirmation",))

        request = CreateBookingRequest.from_draft(wizard.draft)
        try:
            appointment = self._booking.create_booking(request)
        except (SlotConflict, NetworkError) as e:
            self._logger.warning(
                "Booking not created, caller should refresh availability",
                extra={"salon_id": request.salon_id, "reason": str(e)},
            )
            raise

        self._logger.info(
            "Booking created",
            extra={"appointment_id": appointment.id, "salon_id": request.salon_id, "status": appointment.status.value},
        )
        return BookingResult(appointment=appointment, wizard=replace(wizard, submitted=True))
