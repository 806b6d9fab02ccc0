from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from salon_booking.domain.exceptions import InvalidWorkingWindow

DAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


@dataclass(frozen=True)
class WorkingWindow:
    day_of_week: int  # 0 = Sunday ... 6 = Saturday
    start_time: time
    end_time: time
    slot_interval_minutes: int = 30
    is_active: bool = True

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise InvalidWorkingWindow(f"day_of_week must be 0-6, got {self.day_of_week}")
        if self.slot_interval_minutes <= 0:
            raise InvalidWorkingWindow(
                f"slot_interval_minutes must be positive, got {self.slot_interval_minutes}"
            )
        for value in (self.start_time, self.end_time):
            if value.second or value.microsecond:
                raise InvalidWorkingWindow(
                    f"Working hours for {self.day_name} must be whole minutes, got {value.isoformat()}"
                )
        if self.start_time >= self.end_time:
            raise InvalidWorkingWindow(
                f"Invalid time range for {self.day_name}: start time must be before end time"
            )

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    @property
    def length_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start
