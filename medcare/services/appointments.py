from datetime import date
from typing import Callable

from sqlalchemy.orm import Session

from medcare.core.errors import ValidationError
from medcare.database import SCHEDULED_STATUS_ID
from medcare.models.appointment import Appointment, AppointmentStatus
from medcare.models.people import Doctor, Patient, Specialization
from medcare.models.time_slot import TimeSlot
from medcare.services.availability import not_cancelled


def _joined_appointments(db: Session):
    return db.query(Appointment, Patient, Doctor, Specialization, TimeSlot, AppointmentStatus).join(
        Patient, Appointment.patient_id == Patient.patient_id,
    ).join(
        Doctor, Appointment.doctor_id == Doctor.doctor_id,
    ).outerjoin(
        Specialization, Doctor.specialization_id == Specialization.specialization_id,
    ).outerjoin(
        TimeSlot, Appointment.slot_id == TimeSlot.slot_id,
    ).outerjoin(
        AppointmentStatus, Appointment.status_id == AppointmentStatus.status_id,
    )


def _detail_row(appointment, patient, doctor, specialization, slot, appointment_status) -> dict:
    return {
        'appointment_id': appointment.appointment_id,
        'patient_id': appointment.patient_id,
        'patient_name': patient.full_name,
        'patient_phone': patient.phone_no,
        'doctor_id': appointment.doctor_id,
        'doctor_name': doctor.full_name,
        'specialization_name': specialization.specialization_name if specialization else None,
        'appointment_date': appointment.appointment_date,
        'slot_id': appointment.slot_id,
        'start_time': slot.start_time if slot else None,
        'end_time': slot.end_time if slot else None,
        'status_id': appointment.status_id,
        'status_name': appointment_status.status_name if appointment_status else None,
        'consultation_fee': doctor.consultation_fee,
        'created_at': appointment.created_at,
    }


def appointment_details(db: Session, appointment_id: int) -> dict | None:
    result = _joined_appointments(db).filter(Appointment.appointment_id == appointment_id).first()
    if result is None:
        return None
    return _detail_row(*result)


def list_patient_appointments(
    db: Session,
    patient_id: int | None,
    today: Callable[[], date] = date.today,
) -> list[dict]:
    """Upcoming, non-cancelled appointments of a patient."""
    if not patient_id:
        raise ValidationError('patient_id is required')

    results = _joined_appointments(db).filter(
        Appointment.patient_id == patient_id,
        Appointment.appointment_date >= today(),
        not_cancelled(),
    ).order_by(Appointment.appointment_date.asc(), TimeSlot.start_time.asc()).all()

    return [_detail_row(*result) for result in results]


def list_doctor_appointments(
    db: Session,
    doctor_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
) -> list[dict]:
    """Scheduled appointments of a doctor, optionally limited to an inclusive date range."""
    query = _joined_appointments(db).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.status_id == SCHEDULED_STATUS_ID,
    )
    if start_date:
        query = query.filter(Appointment.appointment_date >= start_date)
    if end_date:
        query = query.filter(Appointment.appointment_date <= end_date)

    results = query.order_by(Appointment.appointment_date.asc(), TimeSlot.start_time.asc()).all()
    return [_detail_row(*result) for result in results]
