"""
Tests for booking, rescheduling and cancelling appointments.
"""

from __future__ import annotations

import threading
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest

from salon_booking.application.exceptions import AppointmentNotFound, DateNotBookable, SlotUnavailable, UnknownService
from salon_booking.application.ports.calendar import CalendarPort
from salon_booking.application.use_cases.available_slots import AvailableSlotsUseCase
from salon_booking.application.use_cases.booking import BookingUseCase
from salon_booking.application.use_cases.schedule import default_week
from salon_booking.domain.entities.blocked_date import BlockedDate
from salon_booking.infrastructure.calendar.mock_calendar import MockCalendar
from salon_booking.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from salon_booking.infrastructure.store.memory_store import (
    MemoryAppointmentStore,
    MemoryBlockedDateStore,
    MemoryScheduleStore,
)

WEDNESDAY = date(2024, 5, 1)


class FailingCalendar(CalendarPort):
    def create_event(self, start, end, title, description=None, **kwargs) -> str:
        raise RuntimeError("calendar offline")

    def cancel_event(self, event_id: str) -> bool:
        return False


def _build(calendar: CalendarPort | None = None):
    schedules = MemoryScheduleStore()
    appointments = MemoryAppointmentStore()
    blocked = MemoryBlockedDateStore()
    schedules.replace_week("maria", default_week())
    catalog = ServiceCatalogStore()
    slots = AvailableSlotsUseCase(
        schedules=schedules,
        appointments=appointments,
        blocked_dates=blocked,
        catalog=catalog,
        timezone=ZoneInfo("UTC"),
        today=lambda: date(2024, 4, 1),
    )
    counter = iter(range(1, 1000))
    uc = BookingUseCase(
        slots=slots,
        appointments=appointments,
        catalog=catalog,
        calendar=calendar,
        id_factory=lambda: f"appt-{next(counter)}",
    )
    return uc, appointments, blocked


def test_book_offered_slot():
    calendar = MockCalendar()
    uc, appointments, _ = _build(calendar)

    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["haircut_women", "blow_dry"], client_name="Ana")

    assert appt.appointment_id == "appt-1"
    assert appt.start == datetime(2024, 5, 1, 10, 0)
    assert appt.end == datetime(2024, 5, 1, 11, 15)
    assert appt.service_keys == ("haircut_women", "blow_dry")
    assert appt.status == "scheduled"
    assert appt.calendar_event_id == "mock_event_1"
    assert calendar.events["mock_event_1"]["title"] == "Women's Haircut, Blow Dry & Style - Ana"
    assert appointments.get("appt-1").calendar_event_id == "mock_event_1"
    assert [a.appointment_id for a in uc.list_for_date("maria", WEDNESDAY)] == ["appt-1"]


def test_overlapping_booking_is_rejected_with_conflicting_ids():
    uc, _, _ = _build()
    uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    with pytest.raises(SlotUnavailable) as exc:
        uc.book("maria", WEDNESDAY, time(9, 30), ["pedicure"])
    assert exc.value.conflicting_appointment_ids == ["appt-1"]

    # Back-to-back bookings are fine
    after = uc.book("maria", WEDNESDAY, time(11, 0), ["pedicure"])
    before = uc.book("maria", WEDNESDAY, time(9, 0), ["pedicure"])
    assert after.start == datetime(2024, 5, 1, 11, 0)
    assert before.end == datetime(2024, 5, 1, 10, 0)


def test_start_time_must_be_an_offered_slot():
    uc, _, _ = _build()
    with pytest.raises(SlotUnavailable) as exc:
        uc.book("maria", WEDNESDAY, time(10, 15), ["haircut_men"])
    assert exc.value.conflicting_appointment_ids == []

    # Would run past closing time
    with pytest.raises(SlotUnavailable):
        uc.book("maria", WEDNESDAY, time(18, 30), ["pedicure"])


def test_booking_unbookable_dates():
    uc, _, blocked = _build()
    blocked.add("maria", BlockedDate(blocked_date=WEDNESDAY))

    with pytest.raises(DateNotBookable) as exc:
        uc.book("maria", WEDNESDAY, time(10, 0), ["haircut_men"])
    assert exc.value.reason == "date_blocked"

    with pytest.raises(DateNotBookable):
        uc.book("maria", date(2024, 5, 4), time(10, 0), ["haircut_men"])  # Saturday
    with pytest.raises(DateNotBookable):
        uc.book("maria", date(2024, 3, 29), time(10, 0), ["haircut_men"])


def test_unknown_service_is_rejected():
    uc, appointments, _ = _build()
    with pytest.raises(UnknownService):
        uc.book("maria", WEDNESDAY, time(10, 0), ["tattoo"])
    assert appointments.list_active_for_date("maria", WEDNESDAY) == []


def test_concurrent_requests_for_one_slot_book_once():
    uc, appointments, _ = _build()
    results: list[str] = []
    errors: list[Exception] = []
    barrier = threading.Barrier(8)

    def attempt():
        barrier.wait()
        try:
            results.append(uc.book("maria", WEDNESDAY, time(13, 0), ["root_color"]).appointment_id)
        except SlotUnavailable as e:
            errors.append(e)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 1
    assert len(errors) == 7
    assert len(appointments.list_active_for_date("maria", WEDNESDAY)) == 1


def test_reschedule_may_overlap_its_own_old_time():
    calendar = MockCalendar()
    uc, _, _ = _build(calendar)
    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    moved = uc.reschedule(appt.appointment_id, WEDNESDAY, time(10, 30))

    assert moved.appointment_id == appt.appointment_id
    assert moved.start == datetime(2024, 5, 1, 10, 30)
    assert moved.end == datetime(2024, 5, 1, 11, 30)
    assert moved.calendar_event_id == "mock_event_2"
    assert list(calendar.events) == ["mock_event_2"]
    assert len(uc.list_for_date("maria", WEDNESDAY)) == 1


def test_reschedule_into_another_booking_is_rejected():
    uc, _, _ = _build()
    first = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])
    second = uc.book("maria", WEDNESDAY, time(12, 0), ["pedicure"])

    with pytest.raises(SlotUnavailable) as exc:
        uc.reschedule(first.appointment_id, WEDNESDAY, time(11, 30))
    assert exc.value.conflicting_appointment_ids == [second.appointment_id]
    assert uc.get(first.appointment_id).start == datetime(2024, 5, 1, 10, 0)


def test_reschedule_to_another_day():
    uc, _, _ = _build()
    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["haircut_men"])

    moved = uc.reschedule(appt.appointment_id, date(2024, 5, 2), time(15, 0))

    assert moved.start == datetime(2024, 5, 2, 15, 0)
    assert uc.list_for_date("maria", WEDNESDAY) == []
    assert [a.appointment_id for a in uc.list_for_date("maria", date(2024, 5, 2))] == [appt.appointment_id]


def test_cancel_frees_the_slot():
    calendar = MockCalendar()
    uc, _, _ = _build(calendar)
    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    cancelled = uc.cancel(appt.appointment_id)

    assert cancelled.status == "cancelled"
    assert cancelled.is_active is False
    assert calendar.events == {}
    assert uc.list_for_date("maria", WEDNESDAY) == []
    assert uc.cancel(appt.appointment_id).status == "cancelled"

    rebooked = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])
    assert rebooked.appointment_id != appt.appointment_id

    with pytest.raises(AppointmentNotFound):
        uc.reschedule(appt.appointment_id, WEDNESDAY, time(15, 0))


def test_unknown_appointment():
    uc, _, _ = _build()
    with pytest.raises(AppointmentNotFound):
        uc.get("missing")
    with pytest.raises(AppointmentNotFound):
        uc.cancel("missing")


def test_calendar_failure_does_not_fail_booking():
    uc, appointments, _ = _build(FailingCalendar())

    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["haircut_men"])

    assert appt.calendar_event_id is None
    assert appointments.get(appt.appointment_id) is not None


def test_mock_calendar_events():
    calendar = MockCalendar()
    first = calendar.create_event(datetime(2024, 5, 1, 10), datetime(2024, 5, 1, 11), "Pedicure - Ana")
    second = calendar.create_event(datetime(2024, 5, 1, 12), datetime(2024, 5, 1, 13), "Pedicure - Eva")

    assert (first, second) == ("mock_event_1", "mock_event_2")
    assert calendar.cancel_event(first) is True
    assert calendar.cancel_event(first) is False
    assert list(calendar.events) == ["mock_event_2"]


def test_booking_details_reach_the_calendar():
    calendar = MockCalendar()
    uc, _, _ = _build(calendar)

    uc.book(
        "maria",
        WEDNESDAY,
        time(10, 0),
        ["pedicure"],
        client_name="Ana",
        client_email="ana@example.com",
        notes="Sensitive skin",
    )

    event = calendar.events["mock_event_1"]
    assert event["attendee_name"] == "Ana"
    assert event["attendee_email"] == "ana@example.com"
    assert event["description"] == "Sensitive skin"
    assert event["metadata"] == {"appointment_id": "appt-1", "practitioner_id": "maria", "service_keys": ["pedicure"]}


class InterleavingCalendar(MockCalendar):
    """Runs `during_first_call` while the first event is still being created."""

    def __init__(self) -> None:
        super().__init__()
        self.during_first_call = None

    def create_event(self, *args, **kwargs) -> str:
        action, self.during_first_call = self.during_first_call, None
        if action is not None:
            action()
        return super().create_event(*args, **kwargs)


def test_cancel_and_rebook_during_calendar_sync_keeps_one_booking():
    calendar = InterleavingCalendar()
    uc, appointments, _ = _build(calendar)

    def cancel_and_rebook():
        uc.cancel("appt-1")
        uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    calendar.during_first_call = cancel_and_rebook
    first = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    assert first.appointment_id == "appt-1"
    assert first.status == "cancelled"
    assert first.calendar_event_id is None
    assert appointments.get("appt-1").is_active is False
    assert appointments.get("appt-1").calendar_event_id is None
    assert [a.appointment_id for a in uc.list_for_date("maria", WEDNESDAY)] == ["appt-2"]
    # The late event for the cancelled booking is withdrawn again
    assert list(calendar.events) == ["mock_event_1"]
    assert calendar.events["mock_event_1"]["metadata"]["appointment_id"] == "appt-2"
    assert appointments.get("appt-2").calendar_event_id == "mock_event_1"


def test_reschedule_during_calendar_sync_keeps_the_new_event():
    calendar = InterleavingCalendar()
    uc, appointments, _ = _build(calendar)

    calendar.during_first_call = lambda: uc.reschedule("appt-1", WEDNESDAY, time(14, 0))
    result = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    assert result.start == datetime(2024, 5, 1, 14, 0)
    assert result.calendar_event_id == "mock_event_1"
    assert list(calendar.events) == ["mock_event_1"]
    assert calendar.events["mock_event_1"]["start"] == datetime(2024, 5, 1, 14, 0)
    assert appointments.get("appt-1").calendar_event_id == "mock_event_1"


def test_set_calendar_event_id_only_touches_the_unchanged_booking():
    uc, appointments, _ = _build()
    appt = uc.book("maria", WEDNESDAY, time(10, 0), ["pedicure"])

    assert appointments.set_calendar_event_id(appt, "evt-1") is True
    assert appointments.get(appt.appointment_id).calendar_event_id == "evt-1"

    uc.reschedule(appt.appointment_id, WEDNESDAY, time(15, 0))
    assert appointments.set_calendar_event_id(appt, "evt-2") is False

    moved = appointments.get(appt.appointment_id)
    uc.cancel(appt.appointment_id)
    assert appointments.set_calendar_event_id(moved, "evt-3") is False
    assert appointments.get(appt.appointment_id).calendar_event_id is None
