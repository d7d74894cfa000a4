import logging
from datetime import date, datetime, time
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from medcare.database import get_db
from medcare.services.appointments import list_doctor_appointments, list_patient_appointments
from medcare.services.booking import BookingEngine
from medcare.services.lifecycle import AppointmentLifecycle

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_DIAGNOSIS_LENGTH = 500


class BookSlotRequest(BaseModel):
    patient_id: int | None = None
    doctor_id: int | None = None
    appointment_date: date | None = None
    slot_id: int | None = None


class AppointmentDetailResponse(BaseModel):
    appointment_id: int
    patient_id: int
    patient_name: str
    patient_phone: str | None = None
    doctor_id: int
    doctor_name: str
    specialization_name: str | None = None
    appointment_date: date
    slot_id: int
    start_time: time | None = None
    end_time: time | None = None
    status_id: int | None = None
    status_name: str | None = None
    consultation_fee: float | None = None
    created_at: datetime


class BookingResponse(BaseModel):
    message: str
    appointment: AppointmentDetailResponse


class StatusUpdateRequest(BaseModel):
    updated_by_doctor_id: int | None = None


class StatusUpdateResponse(BaseModel):
    success: bool = True
    message: str
    appointment_id: int
    consultation_exists: bool | None = None
    previous_status: int | None = None
    new_status: int
    status_name: str


class CreateConsultationRequest(BaseModel):
    appointment_id: int | None = None
    doctor_id: int | None = None
    patient_id: int | None = None
    blood_pressure: str | None = None
    temperature: Decimal | None = None
    oxygen_saturation: int | None = None
    diagnosis: str | None = None

    @field_validator('blood_pressure', 'diagnosis')
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_DIAGNOSIS_LENGTH:
            raise ValueError(f'Must be {MAX_DIAGNOSIS_LENGTH} characters or fewer.')

        return normalized

    @field_validator('oxygen_saturation')
    @classmethod
    def validate_oxygen_saturation(cls, value: int | None) -> int | None:
        if value is not None and not 0 <= value <= 100:
            raise ValueError('Oxygen saturation must be between 0 and 100.')
        return value


class ConsultationResponse(BaseModel):
    consultation_id: int
    appointment_id: int
    doctor_id: int
    patient_id: int
    blood_pressure: str | None = None
    temperature: float | None = None
    oxygen_saturation: int | None = None
    diagnosis: str | None = None
    consultation_date: datetime
    patient_name: str | None = None
    doctor_name: str | None = None
    appointment_date: date | None = None


class ConsultationEnvelope(BaseModel):
    message: str
    consultation: ConsultationResponse


class ConsultationLookupResponse(BaseModel):
    exists: bool
    message: str | None = None
    consultation: ConsultationResponse | None = None


@router.post('/slots/book', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def book_slot(data: BookSlotRequest, db: Session = Depends(get_db)):
    appointment = BookingEngine(db).book_slot(
        patient_id=data.patient_id,
        doctor_id=data.doctor_id,
        appointment_date=data.appointment_date,
        slot_id=data.slot_id,
    )
    return {'message': 'Slot booked successfully', 'appointment': appointment}


@router.get('/appointments', response_model=list[AppointmentDetailResponse])
def list_appointments(patient_id: int | None = Query(default=None), db: Session = Depends(get_db)):
    return list_patient_appointments(db, patient_id)


@router.get('/doctors/{doctor_id}/appointments', response_model=list[AppointmentDetailResponse])
def list_doctor_schedule_appointments(
    doctor_id: int,
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    db: Session = Depends(get_db),
):
    return list_doctor_appointments(db, doctor_id, start_date=start_date, end_date=end_date)


@router.put('/appointments/{appointment_id}/cancel', response_model=StatusUpdateResponse)
def cancel_appointment(appointment_id: int, db: Session = Depends(get_db)):
    result = AppointmentLifecycle(db).cancel_appointment(appointment_id)
    return {'message': 'Appointment cancelled', **result}


@router.put('/appointments/{appointment_id}/status', response_model=StatusUpdateResponse)
def update_appointment_status(
    appointment_id: int,
    data: StatusUpdateRequest | None = None,
    db: Session = Depends(get_db),
):
    if data and data.updated_by_doctor_id:
        logger.info('Status sync for appointment %s requested by doctor %s', appointment_id, data.updated_by_doctor_id)

    result = AppointmentLifecycle(db).sync_status_from_consultation(appointment_id)
    if result['consultation_exists'] and result['new_status'] != result['previous_status']:
        message = 'Appointment marked as completed (consultation exists)'
    else:
        message = 'Appointment status unchanged'
    return {'message': message, **result}


@router.post('/consultations', response_model=ConsultationEnvelope, status_code=status.HTTP_201_CREATED)
def create_consultation(data: CreateConsultationRequest, db: Session = Depends(get_db)):
    consultation = AppointmentLifecycle(db).record_consultation(**data.model_dump())
    return {'message': 'Consultation created successfully', 'consultation': consultation}


@router.get('/consultations/appointment/{appointment_id}', response_model=ConsultationLookupResponse)
def get_consultation_for_appointment(appointment_id: int, db: Session = Depends(get_db)):
    return AppointmentLifecycle(db).find_consultation_for_appointment(appointment_id)


@router.get('/consultations/{consultation_id}', response_model=ConsultationResponse)
def get_consultation(consultation_id: int, db: Session = Depends(get_db)):
    return AppointmentLifecycle(db).get_consultation(consultation_id)
