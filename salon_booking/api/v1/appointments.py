from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from salon_booking.api.v1.schemas import AppointmentSchema, BookingRequestSchema, RescheduleRequestSchema
from salon_booking.application.exceptions import (
    AppointmentNotFound,
    DateNotBookable,
    SlotUnavailable,
    UnknownService,
)
from salon_booking.application.use_cases.booking import BookingUseCase
from salon_booking.application.utils.time_utils import format_time_24h, parse_time_24h
from salon_booking.domain.entities.appointment import Appointment
from salon_booking.domain.exceptions import SchedulingError
from salon_booking.wiring.dependencies import get_booking_use_case

router = APIRouter()


def _to_schema(appt: Appointment) -> AppointmentSchema:
    return AppointmentSchema(
        appointment_id=appt.appointment_id,
        practitioner_id=appt.practitioner_id,
        date=appt.appointment_date,
        start_time=format_time_24h(appt.start.time()),
        end_time=format_time_24h(appt.end.time()),
        duration_minutes=appt.duration_minutes,
        service_keys=list(appt.service_keys),
        status=appt.status,
        client_name=appt.client_name,
        client_email=appt.client_email,
        notes=appt.notes,
        calendar_event_id=appt.calendar_event_id,
    )


def _conflict(e: SlotUnavailable) -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={"message": str(e), "conflicting_appointment_ids": e.conflicting_appointment_ids},
    )


@router.post("/appointments", response_model=AppointmentSchema, status_code=201)
def book_appointment(req: BookingRequestSchema, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        appointment = uc.book(
            practitioner_id=req.practitioner_id,
            on_date=req.date,
            start_time=parse_time_24h(req.time),
            service_keys=req.service_keys,
            client_name=req.client_name,
            client_email=req.client_email,
            notes=req.notes,
        )
    except UnknownService as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailable as e:
        raise _conflict(e)
    except DateNotBookable as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (SchedulingError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _to_schema(appointment)


@router.get("/appointments/{appointment_id}", response_model=AppointmentSchema)
def get_appointment(appointment_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return _to_schema(uc.get(appointment_id))
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/practitioners/{practitioner_id}/appointments", response_model=list[AppointmentSchema])
def list_appointments(
    practitioner_id: str,
    on_date: date = Query(..., alias="date"),
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        appointments = uc.list_for_date(practitioner_id, on_date)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [_to_schema(appt) for appt in appointments]


@router.post("/appointments/{appointment_id}/reschedule", response_model=AppointmentSchema)
def reschedule_appointment(
    appointment_id: str,
    req: RescheduleRequestSchema,
    uc: BookingUseCase = Depends(get_booking_use_case),
):
    try:
        appointment = uc.reschedule(appointment_id, req.date, parse_time_24h(req.time))
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SlotUnavailable as e:
        raise _conflict(e)
    except DateNotBookable as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (SchedulingError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _to_schema(appointment)


@router.delete("/appointments/{appointment_id}", response_model=AppointmentSchema)
def cancel_appointment(appointment_id: str, uc: BookingUseCase = Depends(get_booking_use_case)):
    try:
        return _to_schema(uc.cancel(appointment_id))
    except AppointmentNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
