from __future__ import annotations

from abc import ABC, abstractmethod


class AvailabilityPort(ABC):
    @abstractmethod
    def list_booked_slots(self, salon_id: str, date: str, staff_id: str | None = None) -> set[str]:
        """Return the 12-hour labels already taken on ``date``.

        With ``staff_id`` None the set is salon-wide.
        """
        raise NotImplementedError

    @abstractmethod
    def reserve_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        """Mark ``label`` on ``date`` as taken. Raises SlotConflict if it already is."""
        raise NotImplementedError

    @abstractmethod
    def release_slot(self, salon_id: str, date: str, label: str, staff_id: str | None = None) -> None:
        """Free a previously taken slot. Releasing a free slot is not an error."""
        raise NotImplementedError
