from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class BookingStep(IntEnum):
    SERVICE = 1
    STAFF = 2
    DATETIME = 3
    CUSTOMER_INFO = 4
    CONFIRMATION = 5


@dataclass(frozen=True)
class CustomerInfo:
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    is_first_time: bool = False

    @property
    def full_name(self) -> str:
        return " ".join(part.strip() for part in (self.first_name, self.last_name) if part and part.strip())


@dataclass(frozen=True)
class BookingDraft:
    salon_id: str
    service_id: str | None = None
    staff_id: str | None = None
    date: str | None = None  # YYYY-MM-DD
    time: str | None = None  # 12-hour label
    time_slot_id: str | None = None
    customer_info: CustomerInfo = field(default_factory=CustomerInfo)
    special_requests: str = ""
    total_price: float = 0
