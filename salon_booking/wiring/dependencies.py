from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from salon_booking.core.config import settings
from salon_booking.application.ports.appointment_store import AppointmentStorePort
from salon_booking.application.ports.blocked_date_store import BlockedDateStorePort
from salon_booking.application.ports.calendar import CalendarPort
from salon_booking.application.ports.schedule_store import ScheduleStorePort
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.available_slots import AvailableSlotsUseCase
from salon_booking.application.use_cases.blocked_dates import BlockedDatesUseCase
from salon_booking.application.use_cases.booking import BookingUseCase
from salon_booking.application.use_cases.schedule import ScheduleUseCase
from salon_booking.infrastructure.calendar.cal_com_client import CalComCalendar
from salon_booking.infrastructure.calendar.mock_calendar import MockCalendar
from salon_booking.infrastructure.catalog.service_catalog_store import ServiceCatalogStore
from salon_booking.infrastructure.store.json_store import (
    JsonAppointmentStore,
    JsonBlockedDateStore,
    JsonScheduleStore,
)
from salon_booking.infrastructure.store.memory_store import (
    MemoryAppointmentStore,
    MemoryBlockedDateStore,
    MemoryScheduleStore,
)


def _use_json_store() -> bool:
    return settings.STORE_PROVIDER.lower() == "json"


@lru_cache
def get_timezone() -> ZoneInfo:
    try:
        return ZoneInfo(settings.BUSINESS_TIMEZONE)
    except Exception as e:
        logging.getLogger(__name__).warning(
            "Invalid BUSINESS_TIMEZONE, using UTC", extra={"error": str(e)}
        )
        return ZoneInfo("UTC")


@lru_cache
def get_schedule_store() -> ScheduleStorePort:
    if _use_json_store():
        return JsonScheduleStore(data_dir=settings.DATA_DIR)
    return MemoryScheduleStore()


@lru_cache
def get_appointment_store() -> AppointmentStorePort:
    if _use_json_store():
        return JsonAppointmentStore(data_dir=settings.DATA_DIR)
    return MemoryAppointmentStore()


@lru_cache
def get_blocked_date_store() -> BlockedDateStorePort:
    if _use_json_store():
        return JsonBlockedDateStore(data_dir=settings.DATA_DIR)
    return MemoryBlockedDateStore()


@lru_cache
def get_service_catalog() -> ServiceCatalogPort:
    return ServiceCatalogStore()


@lru_cache
def get_calendar() -> CalendarPort:
    logger = logging.getLogger(__name__)
    if not settings.CAL_COM_API_KEY or not settings.CAL_COM_EVENT_TYPE_ID or settings.ENV.lower() in {"dev", "local"}:
        logger.info("Using MockCalendar (Cal.com not configured or ENV=dev/local)")
        return MockCalendar()
    logger.info("Using Cal.com calendar")
    return CalComCalendar()


def get_schedule_use_case() -> ScheduleUseCase:
    return ScheduleUseCase(
        store=get_schedule_store(),
        default_interval_minutes=settings.DEFAULT_SLOT_INTERVAL_MINUTES,
    )


def get_available_slots_use_case() -> AvailableSlotsUseCase:
    return AvailableSlotsUseCase(
        schedules=get_schedule_store(),
        appointments=get_appointment_store(),
        blocked_dates=get_blocked_date_store(),
        catalog=get_service_catalog(),
        timezone=get_timezone(),
        allow_same_day=settings.ALLOW_SAME_DAY_BOOKING,
        horizon_days=settings.BOOKING_HORIZON_DAYS,
    )


def get_blocked_dates_use_case() -> BlockedDatesUseCase:
    return BlockedDatesUseCase(store=get_blocked_date_store(), timezone=get_timezone())


@lru_cache
def get_booking_use_case() -> BookingUseCase:
    # Singleton: its per (practitioner, date) locks must be shared by all requests
    return BookingUseCase(
        slots=get_available_slots_use_case(),
        appointments=get_appointment_store(),
        catalog=get_service_catalog(),
        calendar=get_calendar(),
    )
