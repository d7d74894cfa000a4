"""Appointment status transitions.

Scheduled -> Completed once a consultation exists, Scheduled -> Cancelled on
cancellation. Completed and Cancelled are terminal.
"""

import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medcare.core.errors import ConflictError, InternalError, MedcareError, NotFoundError, ValidationError
from medcare.database import CANCELLED_STATUS_ID, COMPLETED_STATUS_ID, SCHEDULED_STATUS_ID
from medcare.models.appointment import Appointment, AppointmentStatus
from medcare.models.consultation import Consultation
from medcare.models.people import Doctor, Patient

logger = logging.getLogger(__name__)

TERMINAL_STATUS_IDS = (COMPLETED_STATUS_ID, CANCELLED_STATUS_ID)


def consultation_row(consultation: Consultation) -> dict:
    return {
        'consultation_id': consultation.consultation_id,
        'appointment_id': consultation.appointment_id,
        'doctor_id': consultation.doctor_id,
        'patient_id': consultation.patient_id,
        'blood_pressure': consultation.blood_pressure,
        'temperature': consultation.temperature,
        'oxygen_saturation': consultation.oxygen_saturation,
        'diagnosis': consultation.diagnosis,
        'consultation_date': consultation.consultation_date,
    }


class AppointmentLifecycle:
    def __init__(self, db: Session):
        self.db = db

    def _status_name(self, status_id: int) -> str:
        appointment_status = self.db.query(AppointmentStatus).filter(
            AppointmentStatus.status_id == status_id,
        ).first()
        if appointment_status is None:
            # Statuses are seeded at startup; a missing row means the database was not initialized.
            logger.error('Appointment status %s is missing from appointment_statuses', status_id)
            raise InternalError(f'Appointment status {status_id} is not configured')
        return appointment_status.status_name

    def _get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.db.query(Appointment).filter(Appointment.appointment_id == appointment_id).first()
        if appointment is None:
            raise NotFoundError('Appointment not found')
        return appointment

    def _has_consultation(self, appointment_id: int) -> bool:
        return self.db.query(Consultation.consultation_id).filter(
            Consultation.appointment_id == appointment_id,
        ).first() is not None

    def record_consultation(
        self,
        appointment_id: int | None,
        doctor_id: int | None,
        patient_id: int | None,
        blood_pressure: str | None = None,
        temperature: Decimal | None = None,
        oxygen_saturation: int | None = None,
        diagnosis: str | None = None,
    ) -> dict:
        if not all([appointment_id, doctor_id, patient_id]):
            raise ValidationError('appointment_id, doctor_id, and patient_id are required')

        try:
            appointment = self._get_appointment(appointment_id)
            if self.db.query(Doctor.doctor_id).filter(Doctor.doctor_id == doctor_id).first() is None:
                raise NotFoundError('Doctor not found')
            if self.db.query(Patient.patient_id).filter(Patient.patient_id == patient_id).first() is None:
                raise NotFoundError('Patient not found')
            if (appointment.doctor_id, appointment.patient_id) != (doctor_id, patient_id):
                raise ValidationError('doctor_id and patient_id must match the appointment')
            if appointment.status_id == CANCELLED_STATUS_ID:
                raise ConflictError('Cannot record a consultation for a cancelled appointment')

            consultation = Consultation(
                appointment_id=appointment_id,
                doctor_id=doctor_id,
                patient_id=patient_id,
                blood_pressure=blood_pressure,
                temperature=temperature,
                oxygen_saturation=oxygen_saturation,
                diagnosis=diagnosis,
            )
            self.db.add(consultation)
            self.db.commit()
            self.db.refresh(consultation)
        except MedcareError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error creating consultation for appointment %s', appointment_id)
            raise InternalError('Error creating consultation') from exc

        logger.info('Recorded consultation %s for appointment %s', consultation.consultation_id, appointment_id)
        return consultation_row(consultation)

    def get_consultation(self, consultation_id: int) -> dict:
        result = self.db.query(Consultation, Patient, Doctor, Appointment).join(
            Patient, Consultation.patient_id == Patient.patient_id,
        ).join(
            Doctor, Consultation.doctor_id == Doctor.doctor_id,
        ).join(
            Appointment, Consultation.appointment_id == Appointment.appointment_id,
        ).filter(
            Consultation.consultation_id == consultation_id,
        ).first()

        if result is None:
            raise NotFoundError('Consultation not found')

        consultation, patient, doctor, appointment = result
        row = consultation_row(consultation)
        row.update({
            'patient_name': patient.full_name,
            'doctor_name': doctor.full_name,
            'appointment_date': appointment.appointment_date,
        })
        return row

    def find_consultation_for_appointment(self, appointment_id: int) -> dict:
        consultation = self.db.query(Consultation).filter(
            Consultation.appointment_id == appointment_id,
        ).order_by(Consultation.consultation_id.asc()).first()

        if consultation is None:
            return {'exists': False, 'message': 'No consultation found for this appointment'}
        return {'exists': True, 'consultation': consultation_row(consultation)}

    def sync_status_from_consultation(self, appointment_id: int) -> dict:
        """Mark an appointment Completed once a consultation exists for it.

        Repeated calls leave the appointment unchanged and report the same
        ``new_status``.
        """
        try:
            appointment = self._get_appointment(appointment_id)
            previous_status = appointment.status_id
            has_consultation = self._has_consultation(appointment_id)

            if previous_status in TERMINAL_STATUS_IDS:
                new_status = previous_status
            elif has_consultation:
                new_status = COMPLETED_STATUS_ID
            else:
                new_status = previous_status if previous_status is not None else SCHEDULED_STATUS_ID

            status_name = self._status_name(new_status)

            if new_status != previous_status:
                appointment.status_id = new_status
                self.db.commit()
                logger.info('Appointment %s status %s -> %s', appointment_id, previous_status, new_status)
        except MedcareError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error updating status of appointment %s', appointment_id)
            raise InternalError('Failed to update appointment status') from exc

        return {
            'appointment_id': appointment_id,
            'consultation_exists': has_consultation,
            'previous_status': previous_status,
            'new_status': new_status,
            'status_name': status_name,
        }

    def cancel_appointment(self, appointment_id: int) -> dict:
        try:
            appointment = self._get_appointment(appointment_id)
            if appointment.status_id in TERMINAL_STATUS_IDS:
                raise ConflictError(f'Appointment is already {self._status_name(appointment.status_id)}')

            previous_status = appointment.status_id
            status_name = self._status_name(CANCELLED_STATUS_ID)
            appointment.status_id = CANCELLED_STATUS_ID
            self.db.commit()
        except MedcareError:
            self.db.rollback()
            raise
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error cancelling appointment %s', appointment_id)
            raise InternalError('Failed to cancel appointment') from exc

        logger.info('Cancelled appointment %s', appointment_id)
        return {
            'appointment_id': appointment_id,
            'previous_status': previous_status,
            'new_status': CANCELLED_STATUS_ID,
            'status_name': status_name,
        }
