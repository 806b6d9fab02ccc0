from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

from salon_booking.application.exceptions import DateAlreadyBlocked
from salon_booking.application.ports.appointment_store import AppointmentStorePort
from salon_booking.application.ports.blocked_date_store import BlockedDateStorePort
from salon_booking.application.ports.schedule_store import ScheduleStorePort
from salon_booking.application.utils.time_utils import format_time_24h, parse_time_24h
from salon_booking.domain.entities.appointment import Appointment
from salon_booking.domain.entities.blocked_date import BlockedDate
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.infrastructure.store.queries import active_for_date, conflicting_ids, is_same_booking

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_\-]+$")


class _JsonFileStore:
    """One JSON document per practitioner under data_dir/<kind>/."""

    def __init__(self, data_dir: str, kind: str) -> None:
        self._data_dir = Path(data_dir) / kind
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()  # Lock for managing locks dict
        self._logger = logging.getLogger(__name__)

    def _get_lock(self, key: str) -> threading.Lock:
        """Get or create a lock for a practitioner."""
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _get_file_path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid store key {key!r}")
        return self._data_dir / f"{key}.json"

    def _load(self, key: str, default: dict[str, Any]) -> dict[str, Any]:
        file_path = self._get_file_path(key)
        if not file_path.exists():
            return default
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            # If file is corrupted, return defaults
            self._logger.warning("Unreadable store file, using defaults", extra={"path": str(file_path), "error": str(e)})
            return default
        if "version" not in data:
            data["version"] = 1
        return data

    def _save(self, key: str, data: dict[str, Any]) -> None:
        """Save data to JSON file atomically."""
        file_path = self._get_file_path(key)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise


class JsonScheduleStore(_JsonFileStore, ScheduleStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "schedules")

    def get_week(self, practitioner_id: str) -> list[WorkingWindow]:
        with self._get_lock(practitioner_id):
            data = self._load(practitioner_id, {"windows": [], "version": 1})
        windows = [self._deserialize_window(item) for item in data.get("windows", [])]
        windows.sort(key=lambda window: window.day_of_week)
        return windows

    def get_window(self, practitioner_id: str, day_of_week: int) -> WorkingWindow | None:
        for window in self.get_week(practitioner_id):
            if window.day_of_week == day_of_week:
                return window
        return None

    def replace_week(self, practitioner_id: str, windows: list[WorkingWindow]) -> None:
        data = {
            "practitioner_id": practitioner_id,
            "windows": [self._serialize_window(window) for window in windows],
            "version": 1,
        }
        with self._get_lock(practitioner_id):
            self._save(practitioner_id, data)

    def _serialize_window(self, window: WorkingWindow) -> dict[str, Any]:
        return {
            "day_of_week": window.day_of_week,
            "start_time": format_time_24h(window.start_time),
            "end_time": format_time_24h(window.end_time),
            "slot_interval_minutes": window.slot_interval_minutes,
            "is_active": window.is_active,
        }

    def _deserialize_window(self, data: dict[str, Any]) -> WorkingWindow:
        return WorkingWindow(
            day_of_week=int(data["day_of_week"]),
            start_time=parse_time_24h(data["start_time"]),
            end_time=parse_time_24h(data["end_time"]),
            slot_interval_minutes=int(data.get("slot_interval_minutes", 30)),
            is_active=bool(data.get("is_active", True)),
        )


class JsonBlockedDateStore(_JsonFileStore, BlockedDateStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "blocked_dates")

    def list_blocked(self, practitioner_id: str) -> list[BlockedDate]:
        with self._get_lock(practitioner_id):
            data = self._load(practitioner_id, {"blocked": [], "version": 1})
        entries = [
            BlockedDate(blocked_date=date.fromisoformat(item["date"]), reason=item.get("reason"))
            for item in data.get("blocked", [])
        ]
        entries.sort(key=lambda entry: entry.blocked_date)
        return entries

    def add(self, practitioner_id: str, blocked: BlockedDate) -> None:
        with self._get_lock(practitioner_id):
            data = self._load(practitioner_id, {"blocked": [], "version": 1})
            existing = {item["date"] for item in data.get("blocked", [])}
            key = blocked.blocked_date.isoformat()
            if key in existing:
                raise DateAlreadyBlocked(f"{key} is already blocked")
            data.setdefault("blocked", []).append({"date": key, "reason": blocked.reason})
            self._save(practitioner_id, data)

    def remove(self, practitioner_id: str, blocked_date: date) -> bool:
        key = blocked_date.isoformat()
        with self._get_lock(practitioner_id):
            data = self._load(practitioner_id, {"blocked": [], "version": 1})
            remaining = [item for item in data.get("blocked", []) if item["date"] != key]
            if len(remaining) == len(data.get("blocked", [])):
                return False
            data["blocked"] = remaining
            self._save(practitioner_id, data)
            return True


class JsonAppointmentStore(_JsonFileStore, AppointmentStorePort):
    def __init__(self, data_dir: str = "./data") -> None:
        super().__init__(data_dir, "appointments")

    def get(self, appointment_id: str) -> Appointment | None:
        for file_path in sorted(self._data_dir.glob("*.json")):
            practitioner_id = file_path.stem
            for appt in self._load_appointments(practitioner_id):
                if appt.appointment_id == appointment_id:
                    return appt
        return None

    def list_active_for_date(self, practitioner_id: str, on_date: date) -> list[Appointment]:
        return active_for_date(self._load_appointments(practitioner_id), practitioner_id, on_date)

    def save_if_free(self, appointment: Appointment) -> list[str]:
        with self._get_lock(appointment.practitioner_id):
            appointments = self._read(appointment.practitioner_id)
            conflicts = conflicting_ids(appointments, appointment)
            if conflicts:
                return conflicts
            self._write(appointment.practitioner_id, appointments, appointment)
            return []

    def save(self, appointment: Appointment) -> None:
        with self._get_lock(appointment.practitioner_id):
            appointments = self._read(appointment.practitioner_id)
            self._write(appointment.practitioner_id, appointments, appointment)

    def set_calendar_event_id(self, appointment: Appointment, event_id: str | None) -> bool:
        with self._get_lock(appointment.practitioner_id):
            appointments = self._read(appointment.practitioner_id)
            stored = next((a for a in appointments if a.appointment_id == appointment.appointment_id), None)
            if not is_same_booking(stored, appointment):
                return False
            self._write(appointment.practitioner_id, appointments, replace(stored, calendar_event_id=event_id))
            return True

    def _load_appointments(self, practitioner_id: str) -> list[Appointment]:
        with self._get_lock(practitioner_id):
            return self._read(practitioner_id)

    def _read(self, practitioner_id: str) -> list[Appointment]:
        data = self._load(practitioner_id, {"appointments": [], "version": 1})
        return [self._deserialize_appointment(item) for item in data.get("appointments", [])]

    def _write(self, practitioner_id: str, appointments: list[Appointment], changed: Appointment) -> None:
        merged = [appt for appt in appointments if appt.appointment_id != changed.appointment_id]
        merged.append(changed)
        merged.sort(key=lambda appt: appt.start)
        self._save(
            practitioner_id,
            {
                "practitioner_id": practitioner_id,
                "appointments": [self._serialize_appointment(appt) for appt in merged],
                "version": 1,
            },
        )

    def _serialize_appointment(self, appt: Appointment) -> dict[str, Any]:
        return {
            "appointment_id": appt.appointment_id,
            "practitioner_id": appt.practitioner_id,
            "start": appt.start.isoformat(),
            "end": appt.end.isoformat(),
            "service_keys": list(appt.service_keys),
            "status": appt.status,
            "client_name": appt.client_name,
            "client_email": appt.client_email,
            "notes": appt.notes,
            "is_active": appt.is_active,
            "calendar_event_id": appt.calendar_event_id,
            "created_at": appt.created_at,
        }

    def _deserialize_appointment(self, data: dict[str, Any]) -> Appointment:
        return Appointment(
            appointment_id=data["appointment_id"],
            practitioner_id=data["practitioner_id"],
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(data["end"]),
            service_keys=tuple(data.get("service_keys") or ()),
            status=data.get("status", "scheduled"),
            client_name=data.get("client_name"),
            client_email=data.get("client_email"),
            notes=data.get("notes"),
            is_active=data.get("is_active", True),
            calendar_event_id=data.get("calendar_event_id"),
            created_at=data.get("created_at"),
        )
