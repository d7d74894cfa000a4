import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from medcare.core.errors import ConflictError, InternalError, NotFoundError, ValidationError
from medcare.models.people import Doctor
from medcare.models.schedule import DoctorSchedule
from medcare.models.time_slot import TimeSlot
from medcare.services.time_slots import TimeSlotCatalog

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('day_of_week', 'slot_id', 'is_active')
DUPLICATE_SCHEDULE_MESSAGE = 'Schedule for this doctor/day/slot already exists'


def schedule_row(schedule: DoctorSchedule, slot: TimeSlot, doctor: Doctor | None = None) -> dict:
    row = {
        'schedule_id': schedule.schedule_id,
        'doctor_id': schedule.doctor_id,
        'day_of_week': schedule.day_of_week,
        'slot_id': schedule.slot_id,
        'is_active': schedule.is_active,
        'created_at': schedule.created_at,
        'updated_at': schedule.updated_at,
        'slot_number': slot.slot_number,
        'start_time': slot.start_time,
        'end_time': slot.end_time,
    }
    if doctor is not None:
        row['doctor_name'] = doctor.full_name
        row['room_no'] = doctor.room_no
    return row


class ScheduleStore:
    """Weekly recurring availability of each doctor."""

    def __init__(self, db: Session):
        self.db = db
        self.catalog = TimeSlotCatalog(db)

    def _validate_day_of_week(self, day_of_week) -> None:
        if day_of_week is None:
            raise ValidationError('day_of_week and slot_id are required')
        if not 0 <= day_of_week <= 6:
            raise ValidationError('day_of_week must be between 0 (Sunday) and 6 (Saturday)')

    def _validate_slot(self, slot_id) -> TimeSlot:
        if not slot_id:
            raise ValidationError('day_of_week and slot_id are required')
        slot = self.catalog.get_slot(slot_id)
        if slot is None:
            raise ValidationError(f'Time slot {slot_id} does not exist')
        return slot

    def _get_row(self, schedule_id: int) -> dict | None:
        result = self.db.query(DoctorSchedule, TimeSlot, Doctor).join(
            TimeSlot, DoctorSchedule.slot_id == TimeSlot.slot_id,
        ).join(
            Doctor, DoctorSchedule.doctor_id == Doctor.doctor_id,
        ).filter(
            DoctorSchedule.schedule_id == schedule_id,
        ).first()

        if result is None:
            return None
        return schedule_row(*result)

    def add_schedule(self, doctor_id: int, day_of_week: int | None, slot_id: int | None, is_active: bool = True) -> dict:
        self._validate_day_of_week(day_of_week)
        self._validate_slot(slot_id)

        try:
            doctor = self.db.query(Doctor).filter(Doctor.doctor_id == doctor_id).first()
            if doctor is None:
                raise NotFoundError('Doctor not found')

            schedule = DoctorSchedule(
                doctor_id=doctor_id,
                day_of_week=day_of_week,
                slot_id=slot_id,
                is_active=True if is_active is None else is_active,
            )
            self.db.add(schedule)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(DUPLICATE_SCHEDULE_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error creating schedule for doctor %s', doctor_id)
            raise InternalError('Error creating schedule') from exc

        logger.info('Added schedule %s: doctor=%s day=%s slot=%s', schedule.schedule_id, doctor_id, day_of_week, slot_id)
        return self._get_row(schedule.schedule_id)

    def list_schedules(self, doctor_id: int | None = None, day_of_week: int | None = None) -> list[dict]:
        query = self.db.query(DoctorSchedule, TimeSlot, Doctor).join(
            TimeSlot, DoctorSchedule.slot_id == TimeSlot.slot_id,
        ).join(
            Doctor, DoctorSchedule.doctor_id == Doctor.doctor_id,
        )

        if doctor_id is not None:
            query = query.filter(DoctorSchedule.doctor_id == doctor_id)
        if day_of_week is not None:
            query = query.filter(DoctorSchedule.day_of_week == day_of_week)

        results = query.order_by(DoctorSchedule.day_of_week.asc(), TimeSlot.start_time.asc()).all()
        return [schedule_row(*result) for result in results]

    def update_schedule(self, schedule_id: int, fields: dict) -> dict:
        changes = {name: value for name, value in fields.items() if name in UPDATABLE_FIELDS and value is not None}
        if not changes:
            raise ValidationError('No fields to update')

        if 'day_of_week' in changes:
            self._validate_day_of_week(changes['day_of_week'])
        if 'slot_id' in changes:
            self._validate_slot(changes['slot_id'])

        try:
            schedule = self.db.query(DoctorSchedule).filter(DoctorSchedule.schedule_id == schedule_id).first()
            if schedule is None:
                raise NotFoundError('Schedule not found')

            for name, value in changes.items():
                setattr(schedule, name, value)
            schedule.updated_at = datetime.now()
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(DUPLICATE_SCHEDULE_MESSAGE) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error updating schedule %s', schedule_id)
            raise InternalError('Error updating schedule') from exc

        return self._get_row(schedule_id)

    def delete_schedule(self, schedule_id: int) -> None:
        try:
            deleted = self.db.query(DoctorSchedule).filter(DoctorSchedule.schedule_id == schedule_id).delete()
            if not deleted:
                raise NotFoundError('Schedule not found')
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Error deleting schedule %s', schedule_id)
            raise InternalError('Error deleting schedule') from exc

        logger.info('Deleted schedule %s', schedule_id)
