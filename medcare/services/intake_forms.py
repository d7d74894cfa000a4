import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medcare.core.errors import ConflictError, InternalError, MedcareError, NotFoundError, ValidationError
from medcare.models.appointment import Appointment
from medcare.models.appointment_form import AppointmentForm
from medcare.models.people import Doctor, Patient, Specialization

logger = logging.getLogger(__name__)

FORM_EXISTS_MESSAGE = 'Appointment form already exists for this appointment'


def form_row(form: AppointmentForm) -> dict:
    return {
        'form_id': form.form_id,
        'appointment_id': form.appointment_id,
        'patient_id': form.patient_id,
        'symptoms': form.symptoms,
        'medical_history': form.medical_history,
        'created_at': form.created_at,
    }


class IntakeFormDesk:
    """Pre-visit forms patients fill in for their own appointments."""

    def __init__(self, db: Session):
        self.db = db

    def submit_form(
        self,
        appointment_id: int | None,
        patient_id: int | None,
        symptoms: str | None,
        medical_history: str | None = None,
    ) -> dict:
        if not all([appointment_id, patient_id, symptoms]):
            raise ValidationError('appointment_id, patient_id, and symptoms are required')

        try:
            appointment = self.db.query(Appointment.appointment_id).filter(
                Appointment.appointment_id == appointment_id,
                Appointment.patient_id == patient_id,
            ).first()
            if appointment is None:
                raise NotFoundError('Appointment not found or does not belong to this patient')

            existing = self.db.query(AppointmentForm.form_id).filter(
                AppointmentForm.appointment_id == appointment_id,
            ).first()
            if existing is not None:
                raise ConflictError(FORM_EXISTS_MESSAGE)

            form = AppointmentForm(
                appointment_id=appointment_id,
                patient_id=patient_id,
                symptoms=symptoms,
                medical_history=medical_history,
            )
            self.db.add(form)
            self.db.commit()
            self.db.refresh(form)
        except MedcareError:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(FORM_EXISTS_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error creating appointment form for appointment %s', appointment_id)
            raise InternalError('Error creating appointment form') from exc

        logger.info('Patient %s submitted form %s for appointment %s', patient_id, form.form_id, appointment_id)
        return form_row(form)

    def get_form(self, appointment_id: int) -> dict:
        result = self.db.query(AppointmentForm, Patient, Doctor).join(
            Patient, AppointmentForm.patient_id == Patient.patient_id,
        ).join(
            Appointment, AppointmentForm.appointment_id == Appointment.appointment_id,
        ).join(
            Doctor, Appointment.doctor_id == Doctor.doctor_id,
        ).filter(
            AppointmentForm.appointment_id == appointment_id,
        ).first()

        if result is None:
            raise NotFoundError('Appointment form not found')

        form, patient, doctor = result
        row = form_row(form)
        row.update({'patient_name': patient.full_name, 'doctor_name': doctor.full_name})
        return row

    def list_patient_forms(self, patient_id: int) -> list[dict]:
        """Newest first."""
        results = self.db.query(AppointmentForm, Appointment, Doctor, Specialization).join(
            Appointment, AppointmentForm.appointment_id == Appointment.appointment_id,
        ).join(
            Doctor, Appointment.doctor_id == Doctor.doctor_id,
        ).outerjoin(
            Specialization, Doctor.specialization_id == Specialization.specialization_id,
        ).filter(
            AppointmentForm.patient_id == patient_id,
        ).order_by(AppointmentForm.created_at.desc(), AppointmentForm.form_id.desc()).all()

        rows = []
        for form, appointment, doctor, specialization in results:
            row = form_row(form)
            row.update({
                'appointment_date': appointment.appointment_date,
                'doctor_name': doctor.full_name,
                'specialization_name': specialization.specialization_name if specialization else None,
            })
            rows.append(row)
        return rows
