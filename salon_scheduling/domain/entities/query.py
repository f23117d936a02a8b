from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from salon_scheduling.domain.entities.appointment import AppointmentStatus

T = TypeVar("T")


@dataclass(frozen=True)
class FilterCriteria:
    start_date: str | None = None  # inclusive, YYYY-MM-DD
    end_date: str | None = None  # inclusive, YYYY-MM-DD
    statuses: frozenset[AppointmentStatus] = frozenset()
    search: str = ""
    service_id: str | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T]
    page_number: int
    page_size: int
    total_items: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages


@dataclass(frozen=True)
class AppointmentStatistics:
    total_count: int
    today_count: int
    status_counts: dict[AppointmentStatus, int] = field(default_factory=dict)
    total_revenue: float = 0
    today_revenue: float = 0

    def count(self, status: AppointmentStatus) -> int:
        return self.status_counts.get(status, 0)
