from __future__ import annotations

from fastapi import HTTPException

from salon_scheduling.application.exceptions import (
    InvalidRequest,
    InvalidTransition,
    NetworkError,
    NotFound,
    ParseError,
    PersistenceError,
    SchedulingError,
    ServerError,
    SlotConflict,
    StepIncomplete,
)

_STATUS_CODES: tuple[tuple[type[SchedulingError], int], ...] = (
    (NotFound, 404),
    (StepIncomplete, 400),
    (ParseError, 400),
    (InvalidRequest, 400),
    (InvalidTransition, 409),
    (SlotConflict, 409),
    (ServerError, 502),
    (NetworkError, 502),
    (PersistenceError, 503),
)


def http_error(error: SchedulingError) -> HTTPException:
    status_code = next((code for kind, code in _STATUS_CODES if isinstance(error, kind)), 500)
    detail: str | dict = str(error)
    if isinstance(error, StepIncomplete):
        detail = {"message": str(error), "step": error.step, "missing": list(error.missing)}
    return HTTPException(status_code=status_code, detail=detail)
