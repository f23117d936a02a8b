from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from salon_scheduling.api.v1.errors import http_error
from salon_scheduling.api.v1.schemas import (
    AppointmentSchema,
    AvailabilityResponseSchema,
    BookingRequestSchema,
    TimeSlotSchema,
)
from salon_scheduling.application.exceptions import SchedulingError
from salon_scheduling.application.use_cases.appointment_lifecycle import AppointmentManager
from salon_scheduling.application.use_cases.availability import AvailabilityResolver, group_by_band
from salon_scheduling.application.use_cases.booking_wizard import BookingUseCase
from salon_scheduling.wiring.dependencies import (
    get_appointment_manager,
    get_availability_resolver,
    get_booking_use_case,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/salons/{salon_id}/availability", response_model=AvailabilityResponseSchema)
def availability(
    salon_id: str,
    date: str = Query(...),
    staff_id: str | None = Query(None),
    service_id: str | None = Query(None),
    resolver: AvailabilityResolver = Depends(get_availability_resolver),
):
    try:
        slots = resolver.resolve(salon_id, date, staff_id=staff_id, service_id=service_id)
    except SchedulingError as e:
        raise http_error(e)

    return AvailabilityResponseSchema(
        date=date,
        slots=[TimeSlotSchema.from_entity(slot) for slot in slots],
        bands={
            band.value: [TimeSlotSchema.from_entity(slot) for slot in band_slots]
            for band, band_slots in group_by_band(slots).items()
        },
    )


@router.post("/salons/{salon_id}/bookings", response_model=AppointmentSchema, status_code=201)
def create_booking(
    salon_id: str,
    req: BookingRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        wizard = uc.open_wizard(salon_id)
        wizard = wizard.update_draft(service_id=req.service_id)
        if wizard.selected_service is None:
            raise HTTPException(status_code=400, detail=f"Unknown service {req.service_id}")
        wizard = wizard.advance()

        wizard = wizard.update_draft(staff_id=req.staff_id).advance()

        slot = uc.find_slot(wizard, req.date, req.time)
        wizard = wizard.select_slot(slot).advance()

        wizard = wizard.update_draft(
            customer_info=req.customer.model_dump(),
            special_requests=req.special_requests,
        ).advance()

        result = uc.finalize(wizard)
        appointment = manager.register(result.appointment)
    except SchedulingError as e:
        logger.info("Booking rejected", extra={"salon_id": salon_id, "reason": str(e)})
        raise http_error(e)

    return AppointmentSchema.from_entity(appointment)
