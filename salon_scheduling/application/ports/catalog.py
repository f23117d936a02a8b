from __future__ import annotations

from abc import ABC, abstractmethod

from salon_scheduling.domain.entities.catalog import Service, StaffMember


class CatalogPort(ABC):
    @abstractmethod
    def list_services(self, salon_id: str) -> list[Service]:
        """List bookable services for a salon. Raises NotFound for an unknown salon."""
        raise NotImplementedError

    @abstractmethod
    def list_staff(self, salon_id: str) -> list[StaffMember]:
        """List real staff members for a salon (without the "any" sentinel)."""
        raise NotImplementedError
