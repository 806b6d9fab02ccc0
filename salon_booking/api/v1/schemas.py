from datetime import date
from pydantic import BaseModel, Field

TIME_PATTERN = r"^\d{1,2}:\d{2}(:\d{2})?$"  # seconds are accepted and dropped
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class ServiceSchema(BaseModel):
    service_key: str
    display_name: str
    category: str
    price: int | None = None
    duration_minutes: int


class WorkingWindowSchema(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    start_time: str = Field(pattern=TIME_PATTERN)
    end_time: str = Field(pattern=TIME_PATTERN)
    slot_interval_minutes: int = Field(default=30, gt=0)
    is_active: bool = True
    day_name: str | None = None


class WeekScheduleSchema(BaseModel):
    practitioner_id: str | None = None
    windows: list[WorkingWindowSchema] = Field(default_factory=list)


class CandidateSlotSchema(BaseModel):
    time: str
    available: bool


class SlotsResponseSchema(BaseModel):
    practitioner_id: str
    date: date
    duration_minutes: int
    slots: list[CandidateSlotSchema]
    available_times: list[str]
    reason: str | None = None


class BookingRequestSchema(BaseModel):
    practitioner_id: str = Field(min_length=1)
    date: date
    time: str = Field(pattern=TIME_PATTERN)
    service_keys: list[str] = Field(min_length=1)
    client_name: str | None = None
    client_email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    notes: str | None = None


class RescheduleRequestSchema(BaseModel):
    date: date
    time: str = Field(pattern=TIME_PATTERN)


class AppointmentSchema(BaseModel):
    appointment_id: str
    practitioner_id: str
    date: date
    start_time: str
    end_time: str
    duration_minutes: int
    service_keys: list[str]
    status: str
    client_name: str | None = None
    client_email: str | None = None
    notes: str | None = None
    calendar_event_id: str | None = None


class BlockedDateSchema(BaseModel):
    date: date
    reason: str | None = None


class BlockRangeRequestSchema(BaseModel):
    from_date: date
    to_date: date
    reason: str | None = None


class BlockRangeResponseSchema(BaseModel):
    success_count: int
    failure_count: int
    blocked: list[date] = Field(default_factory=list)
    failed: list[date] = Field(default_factory=list)
