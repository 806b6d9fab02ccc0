from __future__ import annotations

import logging
from datetime import date, time

from salon_booking.application.ports.schedule_store import ScheduleStorePort
from salon_booking.application.utils.time_utils import day_of_week
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.domain.exceptions import InvalidWorkingWindow

WORKDAYS = (1, 2, 3, 4, 5)


def default_week(slot_interval_minutes: int = 30) -> list[WorkingWindow]:
    """8 AM to 7 PM, Monday to Friday; weekend windows exist but are inactive."""
    return [
        WorkingWindow(
            day_of_week=day,
            start_time=time(8, 0),
            end_time=time(19, 0),
            slot_interval_minutes=slot_interval_minutes,
            is_active=day in WORKDAYS,
        )
        for day in range(7)
    ]


class ScheduleUseCase:
    def __init__(self, store: ScheduleStorePort, default_interval_minutes: int = 30) -> None:
        self._store = store
        self._default_interval_minutes = default_interval_minutes
        self._logger = logging.getLogger(__name__)

    def get_week(self, practitioner_id: str) -> list[WorkingWindow]:
        return self._store.get_week(practitioner_id)

    def get_default_week(self) -> list[WorkingWindow]:
        return default_week(self._default_interval_minutes)

    def window_for_date(self, practitioner_id: str, on_date: date) -> WorkingWindow | None:
        return self._store.get_window(practitioner_id, day_of_week(on_date))

    def save_week(self, practitioner_id: str, windows: list[WorkingWindow]) -> list[WorkingWindow]:
        seen: set[int] = set()
        for window in windows:
            if window.day_of_week in seen:
                raise InvalidWorkingWindow(f"Duplicate working window for {window.day_name}")
            seen.add(window.day_of_week)

        ordered = sorted(windows, key=lambda window: window.day_of_week)
        self._store.replace_week(practitioner_id, ordered)
        self._logger.info(
            "Working schedule saved",
            extra={
                "practitioner_id": practitioner_id,
                "active_days": [window.day_of_week for window in ordered if window.is_active],
            },
        )
        return ordered
