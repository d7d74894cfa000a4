from datetime import date, datetime

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from medcare.database import get_db
from medcare.services.intake_forms import IntakeFormDesk

router = APIRouter(tags=['appointment-forms'])

MAX_FORM_TEXT_LENGTH = 1000


class CreateAppointmentFormRequest(BaseModel):
    appointment_id: int | None = None
    patient_id: int | None = None
    symptoms: str | None = None
    medical_history: str | None = None

    @field_validator('symptoms', 'medical_history')
    @classmethod
    def normalize_text(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_FORM_TEXT_LENGTH:
            raise ValueError(f'Must be {MAX_FORM_TEXT_LENGTH} characters or fewer.')

        return normalized


class AppointmentFormResponse(BaseModel):
    form_id: int
    appointment_id: int
    patient_id: int
    symptoms: str
    medical_history: str | None = None
    created_at: datetime
    patient_name: str | None = None
    doctor_name: str | None = None
    appointment_date: date | None = None
    specialization_name: str | None = None


class AppointmentFormEnvelope(BaseModel):
    message: str
    form: AppointmentFormResponse


@router.post('/appointment-forms', response_model=AppointmentFormEnvelope, status_code=status.HTTP_201_CREATED)
def create_appointment_form(data: CreateAppointmentFormRequest, db: Session = Depends(get_db)):
    form = IntakeFormDesk(db).submit_form(**data.model_dump())
    return {'message': 'Appointment form submitted successfully', 'form': form}


@router.get('/appointment-forms/{appointment_id}', response_model=AppointmentFormResponse)
def get_appointment_form(appointment_id: int, db: Session = Depends(get_db)):
    return IntakeFormDesk(db).get_form(appointment_id)


@router.get('/patients/{patient_id}/appointment-forms', response_model=list[AppointmentFormResponse])
def list_patient_appointment_forms(patient_id: int, db: Session = Depends(get_db)):
    return IntakeFormDesk(db).list_patient_forms(patient_id)
