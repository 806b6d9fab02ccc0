"""
Tests for durable schedule, blocked date and appointment persistence.
"""

from __future__ import annotations

import json
import tempfile
from datetime import date, datetime, time
from pathlib import Path

import pytest

from salon_booking.application.exceptions import DateAlreadyBlocked
from salon_booking.application.use_cases.schedule import default_week
from salon_booking.domain.entities.appointment import Appointment
from salon_booking.domain.entities.blocked_date import BlockedDate
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.infrastructure.store.json_store import (
    JsonAppointmentStore,
    JsonBlockedDateStore,
    JsonScheduleStore,
)


def _appointment(appointment_id: str, start_hour: int, end_hour: int, **kwargs) -> Appointment:
    return Appointment(
        appointment_id=appointment_id,
        practitioner_id="maria",
        start=datetime(2024, 5, 1, start_hour, 0),
        end=datetime(2024, 5, 1, end_hour, 0),
        **kwargs,
    )


def test_schedule_survives_restart():
    """A saved week is read back by a fresh store on the same directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        JsonScheduleStore(data_dir=tmpdir).replace_week("maria", default_week(slot_interval_minutes=15))

        reloaded = JsonScheduleStore(data_dir=tmpdir)
        week = reloaded.get_week("maria")

        assert [w.day_of_week for w in week] == list(range(7))
        assert week[3].start_time == time(8, 0)
        assert week[3].slot_interval_minutes == 15
        assert week[0].is_active is False
        assert reloaded.get_window("maria", 3) == week[3]
        assert reloaded.get_week("unknown") == []

        # Times are stored as HH:MM strings
        with open(Path(tmpdir) / "schedules" / "maria.json", "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["windows"][1]["start_time"] == "08:00"
        assert data["version"] == 1


def test_schedule_replace_drops_missing_days():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonScheduleStore(data_dir=tmpdir)
        store.replace_week("maria", default_week())
        store.replace_week("maria", [WorkingWindow(day_of_week=6, start_time=time(10, 0), end_time=time(14, 0))])

        assert [w.day_of_week for w in store.get_week("maria")] == [6]
        assert store.get_window("maria", 3) is None


def test_blocked_dates_persist_and_reject_duplicates():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBlockedDateStore(data_dir=tmpdir)
        store.add("maria", BlockedDate(blocked_date=date(2024, 5, 3), reason="Vacation"))
        store.add("maria", BlockedDate(blocked_date=date(2024, 5, 1)))

        with pytest.raises(DateAlreadyBlocked):
            store.add("maria", BlockedDate(blocked_date=date(2024, 5, 1)))

        reloaded = JsonBlockedDateStore(data_dir=tmpdir)
        assert [b.blocked_date for b in reloaded.list_blocked("maria")] == [date(2024, 5, 1), date(2024, 5, 3)]
        assert reloaded.list_blocked("maria")[1].reason == "Vacation"
        assert reloaded.dates("maria") == {date(2024, 5, 1), date(2024, 5, 3)}

        assert reloaded.remove("maria", date(2024, 5, 1)) is True
        assert reloaded.remove("maria", date(2024, 5, 1)) is False
        assert reloaded.dates("maria") == {date(2024, 5, 3)}


def test_appointments_persist_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonAppointmentStore(data_dir=tmpdir)
        saved = _appointment(
            "a1",
            10,
            11,
            service_keys=("pedicure",),
            client_name="Ana",
            client_email="ana@example.com",
            notes="Prefers quiet room",
            calendar_event_id="mock_event_1",
            created_at=1714550000.0,
        )
        assert store.save_if_free(saved) == []

        reloaded = JsonAppointmentStore(data_dir=tmpdir)
        assert reloaded.get("a1") == saved
        assert reloaded.get("missing") is None
        assert [a.appointment_id for a in reloaded.list_active_for_date("maria", date(2024, 5, 1))] == ["a1"]
        assert reloaded.list_active_for_date("maria", date(2024, 5, 2)) == []


def test_save_if_free_rejects_overlap():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonAppointmentStore(data_dir=tmpdir)
        assert store.save_if_free(_appointment("a1", 10, 11)) == []

        assert store.save_if_free(_appointment("a2", 10, 12)) == ["a1"]
        assert store.get("a2") is None

        # Touching intervals are accepted
        assert store.save_if_free(_appointment("a3", 11, 12)) == []
        # An appointment never conflicts with its own previous version
        assert store.save_if_free(_appointment("a3", 11, 13)) == []

        # Cancelled appointments free their time
        store.save(_appointment("a1", 10, 11, is_active=False, status="cancelled"))
        assert store.save_if_free(_appointment("a4", 9, 11)) == []
        active = store.list_active_for_date("maria", date(2024, 5, 1))
        assert [a.appointment_id for a in active] == ["a4", "a3"]


def test_corrupted_file_falls_back_to_defaults():
    """Unreadable JSON is treated as an empty document."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBlockedDateStore(data_dir=tmpdir)
        with open(Path(tmpdir) / "blocked_dates" / "maria.json", "w", encoding="utf-8") as f:
            f.write("{not json")

        assert store.list_blocked("maria") == []
        store.add("maria", BlockedDate(blocked_date=date(2024, 5, 1)))
        assert store.dates("maria") == {date(2024, 5, 1)}


def test_unsafe_practitioner_ids_are_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonScheduleStore(data_dir=tmpdir)
        with pytest.raises(ValueError):
            store.get_week("../outside")
        with pytest.raises(ValueError):
            store.replace_week("a/b", [])


def test_no_temp_files_left_after_save():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonAppointmentStore(data_dir=tmpdir)
        store.save(_appointment("a1", 10, 11))
        assert list((Path(tmpdir) / "appointments").glob("*.tmp")) == []


def test_calendar_event_id_is_recorded_only_on_the_unchanged_booking():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonAppointmentStore(data_dir=tmpdir)
        booked = _appointment("a1", 10, 11)
        store.save_if_free(booked)

        assert store.set_calendar_event_id(booked, "evt-1") is True
        assert JsonAppointmentStore(data_dir=tmpdir).get("a1").calendar_event_id == "evt-1"

        # Moved since the event was requested
        store.save(_appointment("a1", 12, 13))
        assert store.set_calendar_event_id(booked, "evt-2") is False
        assert store.get("a1").calendar_event_id is None

        # Cancelled since the event was requested
        moved = store.get("a1")
        store.save(_appointment("a1", 12, 13, is_active=False, status="cancelled"))
        assert store.set_calendar_event_id(moved, "evt-3") is False
        assert store.get("a1").is_active is False
        assert store.get("a1").calendar_event_id is None
        assert store.set_calendar_event_id(_appointment("missing", 10, 11), "evt-4") is False
