from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from salon_booking.api.v1.schemas import (
    BlockedDateSchema,
    BlockRangeRequestSchema,
    BlockRangeResponseSchema,
    CandidateSlotSchema,
    ServiceSchema,
    SlotsResponseSchema,
    WeekScheduleSchema,
    WorkingWindowSchema,
)
from salon_booking.application.exceptions import DateAlreadyBlocked, DateNotBookable, UnknownService
from salon_booking.application.ports.service_catalog import ServiceCatalogPort
from salon_booking.application.use_cases.available_slots import AvailableSlotsUseCase
from salon_booking.application.use_cases.blocked_dates import BlockedDatesUseCase
from salon_booking.application.use_cases.schedule import ScheduleUseCase
from salon_booking.application.utils.time_utils import format_time_24h, parse_time_24h
from salon_booking.domain.entities.working_window import WorkingWindow
from salon_booking.wiring.dependencies import (
    get_available_slots_use_case,
    get_blocked_dates_use_case,
    get_schedule_use_case,
    get_service_catalog,
)

router = APIRouter()


def _window_to_schema(window: WorkingWindow) -> WorkingWindowSchema:
    return WorkingWindowSchema(
        day_of_week=window.day_of_week,
        start_time=format_time_24h(window.start_time),
        end_time=format_time_24h(window.end_time),
        slot_interval_minutes=window.slot_interval_minutes,
        is_active=window.is_active,
        day_name=window.day_name,
    )


@router.get("/services", response_model=list[ServiceSchema])
def list_services(catalog: ServiceCatalogPort = Depends(get_service_catalog)):
    return [
        ServiceSchema(
            service_key=entry.service_key,
            display_name=entry.display_name,
            category=entry.category,
            price=entry.price,
            duration_minutes=entry.duration_minutes,
        )
        for entry in catalog.list_services()
    ]


@router.get("/practitioners/{practitioner_id}/slots", response_model=SlotsResponseSchema)
def get_slots(
    practitioner_id: str,
    on_date: date = Query(..., alias="date"),
    services: list[str] | None = Query(None),
    duration_minutes: int | None = Query(None),
    uc: AvailableSlotsUseCase = Depends(get_available_slots_use_case),
):
    try:
        result = uc.execute(
            practitioner_id,
            on_date,
            service_keys=services,
            duration_minutes=duration_minutes,
        )
    except UnknownService as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SlotsResponseSchema(
        practitioner_id=result.practitioner_id,
        date=result.date,
        duration_minutes=result.duration_minutes,
        slots=[CandidateSlotSchema(**slot.to_dict()) for slot in result.slots],
        available_times=result.available_times,
        reason=result.reason,
    )


@router.get("/schedules/default", response_model=WeekScheduleSchema)
def get_default_schedule(uc: ScheduleUseCase = Depends(get_schedule_use_case)):
    return WeekScheduleSchema(windows=[_window_to_schema(w) for w in uc.get_default_week()])


@router.get("/practitioners/{practitioner_id}/schedule", response_model=WeekScheduleSchema)
def get_schedule(practitioner_id: str, uc: ScheduleUseCase = Depends(get_schedule_use_case)):
    try:
        windows = uc.get_week(practitioner_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return WeekScheduleSchema(practitioner_id=practitioner_id, windows=[_window_to_schema(w) for w in windows])


@router.put("/practitioners/{practitioner_id}/schedule", response_model=WeekScheduleSchema)
def save_schedule(
    practitioner_id: str,
    req: WeekScheduleSchema,
    uc: ScheduleUseCase = Depends(get_schedule_use_case),
):
    try:
        windows = [
            WorkingWindow(
                day_of_week=w.day_of_week,
                start_time=parse_time_24h(w.start_time),
                end_time=parse_time_24h(w.end_time),
                slot_interval_minutes=w.slot_interval_minutes,
                is_active=w.is_active,
            )
            for w in req.windows
        ]
        saved = uc.save_week(practitioner_id, windows)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return WeekScheduleSchema(practitioner_id=practitioner_id, windows=[_window_to_schema(w) for w in saved])


@router.get("/practitioners/{practitioner_id}/blocked-dates", response_model=list[BlockedDateSchema])
def list_blocked_dates(practitioner_id: str, uc: BlockedDatesUseCase = Depends(get_blocked_dates_use_case)):
    try:
        blocked = uc.list_blocked(practitioner_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [BlockedDateSchema(date=b.blocked_date, reason=b.reason) for b in blocked]


@router.post("/practitioners/{practitioner_id}/blocked-dates", response_model=BlockedDateSchema, status_code=201)
def block_date(
    practitioner_id: str,
    req: BlockedDateSchema,
    uc: BlockedDatesUseCase = Depends(get_blocked_dates_use_case),
):
    try:
        entry = uc.block_date(practitioner_id, req.date, req.reason)
    except DateAlreadyBlocked as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (DateNotBookable, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BlockedDateSchema(date=entry.blocked_date, reason=entry.reason)


@router.post("/practitioners/{practitioner_id}/blocked-dates/range", response_model=BlockRangeResponseSchema)
def block_date_range(
    practitioner_id: str,
    req: BlockRangeRequestSchema,
    uc: BlockedDatesUseCase = Depends(get_blocked_dates_use_case),
):
    try:
        result = uc.block_range(practitioner_id, req.from_date, req.to_date, req.reason)
    except (DateNotBookable, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return BlockRangeResponseSchema(
        success_count=result.success_count,
        failure_count=result.failure_count,
        blocked=result.blocked,
        failed=result.failed,
    )


@router.delete("/practitioners/{practitioner_id}/blocked-dates/{blocked_date}", status_code=204)
def unblock_date(
    practitioner_id: str,
    blocked_date: date,
    uc: BlockedDatesUseCase = Depends(get_blocked_dates_use_case),
):
    try:
        removed = uc.unblock(practitioner_id, blocked_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail=f"{blocked_date.isoformat()} is not blocked")
