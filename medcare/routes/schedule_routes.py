from datetime import datetime, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from medcare.database import get_db
from medcare.services.schedules import ScheduleStore
from medcare.services.time_slots import TimeSlotCatalog

router = APIRouter(tags=['schedules'])


class TimeSlotResponse(BaseModel):
    slot_id: int
    slot_number: int
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class CreateScheduleRequest(BaseModel):
    day_of_week: int | None = None
    slot_id: int | None = None
    is_active: bool | None = None


class UpdateScheduleRequest(BaseModel):
    day_of_week: int | None = None
    slot_id: int | None = None
    is_active: bool | None = None


class ScheduleResponse(BaseModel):
    schedule_id: int
    doctor_id: int
    day_of_week: int
    slot_id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime | None = None
    slot_number: int
    start_time: time
    end_time: time
    doctor_name: str | None = None
    room_no: str | None = None


class ScheduleEnvelope(BaseModel):
    message: str
    schedule: ScheduleResponse


class MessageResponse(BaseModel):
    message: str


@router.get('/time-slots', response_model=list[TimeSlotResponse])
def list_time_slots(db: Session = Depends(get_db)):
    return TimeSlotCatalog(db).list_slots()


@router.post('/doctors/{doctor_id}/schedules', response_model=ScheduleEnvelope, status_code=status.HTTP_201_CREATED)
def create_schedule(doctor_id: int, data: CreateScheduleRequest, db: Session = Depends(get_db)):
    schedule = ScheduleStore(db).add_schedule(
        doctor_id=doctor_id,
        day_of_week=data.day_of_week,
        slot_id=data.slot_id,
        is_active=data.is_active,
    )
    return {'message': 'Schedule created', 'schedule': schedule}


@router.get('/schedules', response_model=list[ScheduleResponse])
def list_schedules(
    doctor_id: int | None = Query(default=None),
    day_of_week: int | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return ScheduleStore(db).list_schedules(doctor_id=doctor_id, day_of_week=day_of_week)


@router.put('/schedules/{schedule_id}', response_model=ScheduleEnvelope)
def update_schedule(schedule_id: int, data: UpdateScheduleRequest, db: Session = Depends(get_db)):
    schedule = ScheduleStore(db).update_schedule(schedule_id, data.model_dump(exclude_none=True))
    return {'message': 'Schedule updated', 'schedule': schedule}


@router.delete('/schedules/{schedule_id}', response_model=MessageResponse)
def delete_schedule(schedule_id: int, db: Session = Depends(get_db)):
    ScheduleStore(db).delete_schedule(schedule_id)
    return {'message': 'Schedule deleted'}
