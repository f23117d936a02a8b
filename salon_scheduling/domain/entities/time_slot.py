from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SlotBand(str, Enum):
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"

    @classmethod
    def for_hour(cls, hour: int) -> "SlotBand":
        if hour < 12:
            return cls.MORNING
        if hour < 17:
            return cls.AFTERNOON
        return cls.EVENING


@dataclass(frozen=True)
class TimeSlot:
    date: str  # YYYY-MM-DD
    time: str  # 12-hour label, e.g. "10:00 AM"
    available: bool
    staff_id: str
    popular: bool = False
    last_spot: bool = False
    slot_id: str | None = None  # backend time slot id
    end_time: str | None = None


@dataclass(frozen=True)
class SlotGrid:
    """Daily grid of bookable start times, in minutes since midnight.

    ``end_minutes`` is exclusive. Starts inside ``[blackout_start, blackout_end)``
    are never bookable.
    """

    start_minutes: int = 9 * 60
    end_minutes: int = 18 * 60
    increment_minutes: int = 30
    blackout_start: int | None = 13 * 60
    blackout_end: int | None = 14 * 60

    def __post_init__(self) -> None:
        if self.increment_minutes <= 0:
            raise ValueError(f"increment_minutes must be positive, got {self.increment_minutes}")
        if self.end_minutes <= self.start_minutes:
            raise ValueError("Slot grid must end after it starts")

    def in_blackout(self, minutes: int) -> bool:
        if self.blackout_start is None or self.blackout_end is None:
            return False
        return self.blackout_start <= minutes < self.blackout_end

    def start_times(self) -> list[int]:
        return [
            minutes
            for minutes in range(self.start_minutes, self.end_minutes, self.increment_minutes)
            if not self.in_blackout(minutes)
        ]

    def contains(self, minutes: int) -> bool:
        return minutes in self.start_times()
