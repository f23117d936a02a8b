from __future__ import annotations

from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from salon_scheduling.api.v1.errors import http_error
from salon_scheduling.api.v1.schemas import (
    AppointmentPageSchema,
    AppointmentSchema,
    CancelRequestSchema,
    CompleteRequestSchema,
    ConfirmRequestSchema,
    RescheduleRequestSchema,
    SummarySchema,
)
from salon_scheduling.application.exceptions import SchedulingError
from salon_scheduling.application.use_cases.appointment_lifecycle import AppointmentManager
from salon_scheduling.application.use_cases.appointment_query import (
    default_criteria,
    export_csv,
    filter_appointments,
    paginate,
    summarize,
)
from salon_scheduling.core.config import settings
from salon_scheduling.domain.entities.appointment import AppointmentStatus
from salon_scheduling.domain.entities.query import FilterCriteria
from salon_scheduling.wiring.dependencies import get_appointment_manager, get_timezone

router = APIRouter()


def _criteria(
    start_date: str | None = Query(None),
    end_date: str | None = Query(None),
    status: list[AppointmentStatus] | None = Query(None),
    search: str = Query(""),
    service_id: str | None = Query(None),
    upcoming: bool = Query(False),
) -> FilterCriteria:
    if upcoming and start_date is None and end_date is None:
        window = default_criteria(datetime.now(get_timezone()).date(), settings.DASHBOARD_WINDOW_DAYS)
        start_date, end_date = window.start_date, window.end_date
    return FilterCriteria(
        start_date=start_date,
        end_date=end_date,
        statuses=frozenset(status or ()),
        search=search.strip(),
        service_id=service_id,
    )


@router.get("/appointments", response_model=AppointmentPageSchema)
def list_appointments(
    criteria: FilterCriteria = Depends(_criteria),
    page: int = Query(1, ge=1),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    matching = filter_appointments(manager.book.snapshot(), criteria)
    result = paginate(matching, page_size=size, page_number=page)
    return AppointmentPageSchema(
        items=[AppointmentSchema.from_entity(a) for a in result.items],
        page=result.page_number,
        size=result.page_size,
        total_items=result.total_items,
        total_pages=result.total_pages,
    )


@router.get("/appointments/summary", response_model=SummarySchema)
def appointment_summary(
    today: str | None = Query(None),
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    if today is None:
        today = datetime.now(get_timezone()).date().isoformat()
    else:
        try:
            date.fromisoformat(today)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Invalid date {today!r}, expected YYYY-MM-DD")

    stats = summarize(manager.book.snapshot(), today)
    return SummarySchema(
        total_count=stats.total_count,
        today_count=stats.today_count,
        status_counts={status.value: count for status, count in stats.status_counts.items()},
        total_revenue=stats.total_revenue,
        today_revenue=stats.today_revenue,
    )


@router.get("/appointments/export", response_class=PlainTextResponse)
def export_appointments(
    criteria: FilterCriteria = Depends(_criteria),
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    body = export_csv(filter_appointments(manager.book.snapshot(), criteria))
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="appointments.csv"'},
    )


@router.post("/appointments/{appointment_id}/confirm", response_model=AppointmentSchema)
def confirm_appointment(
    appointment_id: str,
    req: ConfirmRequestSchema,
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        appointment = manager.confirm(
            appointment_id,
            notify_email=req.notify_email,
            notify_sms=req.notify_sms,
            assigned_staff=req.assigned_staff,
            salon_notes=req.salon_notes,
        )
    except SchedulingError as e:
        raise http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.post("/appointments/{appointment_id}/reschedule", response_model=AppointmentSchema)
def reschedule_appointment(
    appointment_id: str,
    req: RescheduleRequestSchema,
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        appointment = manager.reschedule(
            appointment_id,
            req.new_date,
            req.new_time,
            reason=req.reason,
            notify_customer=req.notify_customer,
        )
    except SchedulingError as e:
        raise http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentSchema)
def cancel_appointment(
    appointment_id: str,
    req: CancelRequestSchema,
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        appointment = manager.cancel(
            appointment_id,
            req.reason,
            notes=req.notes,
            process_refund=req.process_refund,
            notify_customer=req.notify_customer,
            cancelled_by=req.cancelled_by,
        )
    except SchedulingError as e:
        raise http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.post("/appointments/{appointment_id}/complete", response_model=AppointmentSchema)
def complete_appointment(
    appointment_id: str,
    req: CompleteRequestSchema,
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        appointment = manager.complete(appointment_id, notes=req.notes)
    except SchedulingError as e:
        raise http_error(e)
    return AppointmentSchema.from_entity(appointment)


@router.post("/appointments/{appointment_id}/no-show", response_model=AppointmentSchema)
def mark_no_show(
    appointment_id: str,
    manager: AppointmentManager = Depends(get_appointment_manager),
):
    try:
        appointment = manager.mark_no_show(appointment_id)
    except SchedulingError as e:
        raise http_error(e)
    return AppointmentSchema.from_entity(appointment)
