from __future__ import annotations

import json
import threading
from datetime import datetime
from pathlib import Path
from typing import Any

from salon_scheduling.application.exceptions import PersistenceError
from salon_scheduling.application.ports.appointment_store import AppointmentStorePort
from salon_scheduling.domain.entities.appointment import (
    Appointment,
    AppointmentStatus,
    CancelledBy,
    CustomerSummary,
    ServiceSummary,
)

_TIMESTAMP_FIELDS = ("booked_at", "confirmed_at", "completed_at", "cancelled_at")


class JsonAppointmentStore(AppointmentStorePort):
    """One JSON file per appointment, written atomically."""

    def __init__(self, data_dir: str = "./data/appointments") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _get_file_path(self, appointment_id: str) -> Path:
        return self._data_dir / f"{appointment_id}.json"

    def save_appointment(self, appointment: Appointment) -> None:
        file_path = self._get_file_path(appointment.id)
        temp_path = file_path.with_suffix(".json.tmp")
        data = {"version": 1, "appointment": self._serialize(appointment)}

        with self._lock:
            try:
                with open(temp_path, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                # Atomic rename
                temp_path.replace(file_path)
            except OSError as e:
                if temp_path.exists():
                    temp_path.unlink(missing_ok=True)
                raise PersistenceError(f"Could not save appointment {appointment.id}: {e}") from e

    def list_appointments(self, salon_id: str | None = None) -> list[Appointment]:
        appointments: list[Appointment] = []
        with self._lock:
            for file_path in sorted(self._data_dir.glob("*.json")):
                appointments.append(self._load(file_path))
        appointments.sort(key=lambda a: (a.booked_at.timestamp() if a.booked_at else 0.0, a.number))
        return [a for a in appointments if salon_id is None or a.salon_id == salon_id]

    def _load(self, file_path: Path) -> Appointment:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return self._deserialize(data["appointment"])
        except (json.JSONDecodeError, OSError, KeyError, ValueError) as e:
            raise PersistenceError(f"Could not read {file_path.name}: {e}") from e

    def _serialize(self, appointment: Appointment) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": appointment.id,
            "number": appointment.number,
            "customer": {
                "id": appointment.customer.id,
                "name": appointment.customer.name,
                "phone": appointment.customer.phone,
                "email": appointment.customer.email,
            },
            "service": {
                "id": appointment.service.id,
                "name": appointment.service.name,
                "price": appointment.service.price,
                "duration": appointment.service.duration,
            },
            "date": appointment.date,
            "start_time": appointment.start_time,
            "end_time": appointment.end_time,
            "status": appointment.status.value,
            "salon_id": appointment.salon_id,
            "staff_id": appointment.staff_id,
            "assigned_staff": appointment.assigned_staff,
            "notes": appointment.notes,
            "salon_notes": appointment.salon_notes,
            "cancellation_reason": appointment.cancellation_reason,
            "cancellation_notes": appointment.cancellation_notes,
            "cancelled_by": appointment.cancelled_by.value if appointment.cancelled_by else None,
            "refund_requested": appointment.refund_requested,
        }
        # datetimes as ISO strings
        for name in _TIMESTAMP_FIELDS:
            value = getattr(appointment, name)
            result[name] = value.isoformat() if value else None
        return result

    def _deserialize(self, data: dict[str, Any]) -> Appointment:
        timestamps = {
            name: datetime.fromisoformat(data[name]) if data.get(name) else None for name in _TIMESTAMP_FIELDS
        }
        return Appointment(
            id=data["id"],
            number=data["number"],
            customer=CustomerSummary(**data["customer"]),
            service=ServiceSummary(**data["service"]),
            date=data["date"],
            start_time=data["start_time"],
            end_time=data["end_time"],
            status=AppointmentStatus(data["status"]),
            salon_id=data.get("salon_id"),
            staff_id=data.get("staff_id"),
            assigned_staff=data.get("assigned_staff"),
            notes=data.get("notes"),
            salon_notes=data.get("salon_notes"),
            cancellation_reason=data.get("cancellation_reason"),
            cancellation_notes=data.get("cancellation_notes"),
            cancelled_by=CancelledBy(data["cancelled_by"]) if data.get("cancelled_by") else None,
            refund_requested=data.get("refund_requested", False),
            **timestamps,
        )
