from __future__ import annotations

import re
from datetime import date

from pydantic import BaseModel, Field, ValidationError, field_validator

from salon_scheduling.application.exceptions import InvalidRequest, ParseError
from salon_scheduling.application.utils.time_arithmetic import normalize_label
from salon_scheduling.domain.entities.booking_draft import BookingDraft

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\-\(\)]{10,}$")
SPECIAL_REQUESTS_MAX_LENGTH = 500


class CustomerInfoDTO(BaseModel):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: str
    phone: str
    is_first_time: bool = False

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        value = value.strip()
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Please enter a valid email address")
        return value

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.match(re.sub(r"\s", "", value)):
            raise ValueError("Please enter a valid phone number")
        return value.strip()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class CreateBookingRequest(BaseModel):
    salon_id: str = Field(min_length=1)
    service_id: str = Field(min_length=1)
    staff_id: str = Field(min_length=1)
    date: str
    time: str
    time_slot_id: str | None = None
    customer: CustomerInfoDTO
    special_requests: str = Field(default="", max_length=SPECIAL_REQUESTS_MAX_LENGTH)
    total_price: float = Field(default=0, ge=0)

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        date.fromisoformat(value)
        return value

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        try:
            return normalize_label(value)
        except ParseError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def from_draft(cls, draft: BookingDraft) -> "CreateBookingRequest":
        """Build a validated request from a complete draft. Raises InvalidRequest."""
        info = draft.customer_info
        try:
            return cls(
                salon_id=draft.salon_id,
                service_id=draft.service_id,
                staff_id=draft.staff_id,
                date=draft.date,
                time=draft.time,
                time_slot_id=draft.time_slot_id,
                customer=CustomerInfoDTO(
                    first_name=info.first_name,
                    last_name=info.last_name,
                    email=info.email,
                    phone=info.phone,
                    is_first_time=info.is_first_time,
                ),
                special_requests=draft.special_requests,
                total_price=draft.total_price,
            )
        except ValidationError as e:
            raise InvalidRequest(f"Invalid booking request: {e}") from e
