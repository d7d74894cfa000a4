"""Slot booking.

``BookingEngine.book_slot`` runs an ordered sequence of preconditions and the
insert of the new appointment in a single session transaction. The partial
unique indexes on ``appointments`` back the duplicate checks: when two
requests race past the checks, the loser's insert fails at flush, its
transaction is rolled back and the failure is reported as a conflict.
"""

import logging
from datetime import date

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medcare.core.errors import ConflictError, InternalError, MedcareError, NotFoundError, ValidationError
from medcare.database import SCHEDULED_STATUS_ID
from medcare.models.appointment import Appointment
from medcare.models.people import Doctor, Patient
from medcare.services.appointments import appointment_details
from medcare.services.availability import AvailabilityResolver, SlotState, active_appointments

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = 'patient_id, doctor_id, appointment_date, and slot_id are required'
DUPLICATE_BOOKING_MESSAGE = 'Patient already has an appointment with this doctor on this date'
SLOT_NOT_IN_SCHEDULE_MESSAGE = "This slot is not in the doctor's schedule for this day"
SLOT_BOOKED_MESSAGE = 'This slot is already booked for the selected date'


class BookingEngine:
    def __init__(self, db: Session, resolver: AvailabilityResolver | None = None):
        self.db = db
        self.resolver = resolver or AvailabilityResolver(db)

    def _has_patient_booking(self, patient_id: int, doctor_id: int, appointment_date: date) -> bool:
        return active_appointments(self.db, doctor_id, appointment_date).filter(
            Appointment.patient_id == patient_id,
        ).first() is not None

    def _reserve(self, patient_id: int, doctor_id: int, appointment_date: date, slot_id: int) -> int:
        if self.db.query(Patient.patient_id).filter(Patient.patient_id == patient_id).first() is None:
            raise NotFoundError('Patient not found')

        if self.db.query(Doctor.doctor_id).filter(Doctor.doctor_id == doctor_id).first() is None:
            raise NotFoundError('Doctor not found')

        if self._has_patient_booking(patient_id, doctor_id, appointment_date):
            raise ConflictError(DUPLICATE_BOOKING_MESSAGE)

        state, _ = self.resolver.slot_state(doctor_id, slot_id, appointment_date)
        if state in (SlotState.NOT_IN_SCHEDULE, SlotState.INACTIVE):
            raise ValidationError(SLOT_NOT_IN_SCHEDULE_MESSAGE)
        if state is SlotState.BOOKED:
            raise ConflictError(SLOT_BOOKED_MESSAGE)

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            slot_id=slot_id,
            status_id=SCHEDULED_STATUS_ID,
        )
        self.db.add(appointment)
        self.db.flush()
        appointment_id = appointment.appointment_id
        self.db.commit()

        return appointment_id

    def _conflict_for(self, patient_id: int, doctor_id: int, appointment_date: date) -> ConflictError:
        # Only called after rollback, so this sees the winner of the race.
        if self._has_patient_booking(patient_id, doctor_id, appointment_date):
            return ConflictError(DUPLICATE_BOOKING_MESSAGE)
        return ConflictError(SLOT_BOOKED_MESSAGE)

    def book_slot(
        self,
        patient_id: int | None,
        doctor_id: int | None,
        appointment_date: date | None,
        slot_id: int | None,
    ) -> dict:
        if not all([patient_id, doctor_id, appointment_date, slot_id]):
            raise ValidationError(MISSING_FIELDS_MESSAGE)

        self.resolver.horizon.check(appointment_date)

        try:
            appointment_id = self._reserve(patient_id, doctor_id, appointment_date, slot_id)
        except MedcareError:
            self.db.rollback()
            raise
        except IntegrityError as exc:
            self.db.rollback()
            conflict = self._conflict_for(patient_id, doctor_id, appointment_date)
            logger.warning(
                'Booking conflict for doctor=%s slot=%s date=%s: %s',
                doctor_id, slot_id, appointment_date, conflict.detail,
            )
            raise conflict from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error booking slot %s for doctor %s on %s', slot_id, doctor_id, appointment_date)
            raise InternalError('Error booking slot') from exc

        logger.info(
            'Booked appointment %s: patient=%s doctor=%s slot=%s date=%s',
            appointment_id, patient_id, doctor_id, slot_id, appointment_date,
        )

        details = appointment_details(self.db, appointment_id)
        if details is None:
            raise InternalError('Booked appointment could not be read back')
        return details
