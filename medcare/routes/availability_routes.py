from datetime import date, time

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from medcare.database import get_db
from medcare.services.availability import AvailabilityResolver

router = APIRouter(tags=['availability'])


class DoctorSummaryResponse(BaseModel):
    doctor_id: int
    doctor_name: str
    specialization_name: str | None = None
    consultation_fee: float | None = None


class SlotAvailabilityResponse(BaseModel):
    schedule_id: int
    doctor_id: int
    slot_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_available: bool
    status: str


class DateAvailabilityResponse(BaseModel):
    doctor: DoctorSummaryResponse
    date: date
    day_of_week: int
    slots: list[SlotAvailabilityResponse]
    available_count: int
    total_slots: int


class SchedulePeriodResponse(BaseModel):
    from_date: date = Field(serialization_alias='from', validation_alias='from')
    to: date


class DayAvailabilityResponse(BaseModel):
    date: date
    day_of_week: int
    day_name: str
    slots: list[SlotAvailabilityResponse]
    available_slots: int
    total_slots: int


class WeekAvailabilityResponse(BaseModel):
    doctor: DoctorSummaryResponse
    schedule_period: SchedulePeriodResponse
    availability: list[DayAvailabilityResponse]


class SlotDetailsResponse(BaseModel):
    start_time: time
    end_time: time


class SlotCheckResponse(BaseModel):
    is_available: bool
    reason: str
    slot_details: SlotDetailsResponse | None = None


@router.get('/doctors/{doctor_id}/available-schedule', response_model=DateAvailabilityResponse)
def get_available_schedule(
    doctor_id: int,
    date: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return AvailabilityResolver(db).resolve_availability(doctor_id, date)


@router.get('/doctors/{doctor_id}/latest-schedule', response_model=WeekAvailabilityResponse)
def get_latest_schedule(doctor_id: int, db: Session = Depends(get_db)):
    return AvailabilityResolver(db).resolve_week_availability(doctor_id)


@router.get('/slots/check-availability', response_model=SlotCheckResponse, response_model_exclude_none=True)
def check_slot_availability(
    doctor_id: int | None = Query(default=None),
    slot_id: int | None = Query(default=None),
    appointment_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return AvailabilityResolver(db).check_slot_availability(doctor_id, slot_id, appointment_date)
