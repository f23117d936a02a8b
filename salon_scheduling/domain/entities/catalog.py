from __future__ import annotations

from dataclasses import dataclass

ANY_STAFF_ID = "any"


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    category: str
    duration: int  # minutes
    price: float

    def __post_init__(self) -> None:
        if isinstance(self.duration, bool) or not isinstance(self.duration, int) or self.duration <= 0:
            raise ValueError(f"Service duration must be a positive integer, got {self.duration!r}")
        if self.price < 0:
            raise ValueError(f"Service price must be non-negative, got {self.price!r}")


@dataclass(frozen=True)
class StaffMember:
    id: str
    name: str
    available: bool = True
    role: str | None = None

    @property
    def is_any(self) -> bool:
        return self.id == ANY_STAFF_ID


ANY_STAFF = StaffMember(id=ANY_STAFF_ID, name="Any Available Stylist", available=True, role="Any Staff")


def find_service(services: list[Service] | tuple[Service, ...], service_id: str | None) -> Service | None:
    if service_id is None:
        return None
    for service in services:
        if service.id == service_id:
            return service
    return None
