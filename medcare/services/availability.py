"""Per-date availability of a doctor's weekly schedule.

A doctor's weekly schedule is the template; appointments instantiate it on
concrete dates. Availability is the join of the two and is never stored.
The booking horizon and the booked-slot lookup defined here are shared by
every read path and by the booking engine.
"""

import logging
from datetime import date, timedelta
from enum import Enum
from typing import Callable

from sqlalchemy import or_
from sqlalchemy.orm import Session

from medcare.core import config
from medcare.core.errors import NotFoundError, ValidationError
from medcare.database import CANCELLED_STATUS_ID
from medcare.models.appointment import Appointment
from medcare.models.people import Doctor, Specialization
from medcare.models.schedule import DoctorSchedule
from medcare.models.time_slot import TimeSlot

logger = logging.getLogger(__name__)

DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']
WEEK_LENGTH_DAYS = 7

PAST_DATE_MESSAGE = 'Cannot book appointments in the past'
NO_SCHEDULE_ROW_MESSAGE = "Slot not in doctor's schedule for this day of week"


class SlotState(str, Enum):
    NOT_IN_SCHEDULE = 'Not in doctor schedule'
    INACTIVE = 'Schedule inactive'
    BOOKED = 'Already booked'
    AVAILABLE = 'Available'


def day_of_week(target: date) -> int:
    """Return 0 for Sunday through 6 for Saturday."""
    return target.isoweekday() % 7


def not_cancelled():
    return or_(Appointment.status_id.is_(None), Appointment.status_id != CANCELLED_STATUS_ID)


def active_appointments(db: Session, doctor_id: int, target: date):
    return db.query(Appointment).filter(
        Appointment.doctor_id == doctor_id,
        Appointment.appointment_date == target,
        not_cancelled(),
    )


def booked_slot_ids(db: Session, doctor_id: int, target: date) -> set[int]:
    rows = active_appointments(db, doctor_id, target).with_entities(Appointment.slot_id).all()
    return {slot_id for (slot_id,) in rows}


def doctor_summary(db: Session, doctor_id: int) -> dict | None:
    result = db.query(Doctor, Specialization).outerjoin(
        Specialization, Doctor.specialization_id == Specialization.specialization_id,
    ).filter(
        Doctor.doctor_id == doctor_id,
    ).first()

    if result is None:
        return None

    doctor, specialization = result
    return {
        'doctor_id': doctor.doctor_id,
        'doctor_name': doctor.full_name,
        'specialization_name': specialization.specialization_name if specialization else None,
        'consultation_fee': doctor.consultation_fee,
    }


class BookingHorizon:
    """The inclusive window [today, today + days] in which bookings are accepted."""

    def __init__(self, today: Callable[[], date] = date.today, days: int | None = None):
        self.today = today
        self.days = config.BOOKING_HORIZON_DAYS if days is None else days

    @property
    def too_far_message(self) -> str:
        return f'Appointments can only be booked up to {self.days} days in advance'

    def violation(self, target: date) -> str | None:
        today = self.today()
        if target < today:
            return PAST_DATE_MESSAGE
        if target > today + timedelta(days=self.days):
            return self.too_far_message
        return None

    def check(self, target: date) -> None:
        message = self.violation(target)
        if message:
            raise ValidationError(message)


class AvailabilityResolver:
    def __init__(self, db: Session, horizon: BookingHorizon | None = None):
        self.db = db
        self.horizon = horizon or BookingHorizon()

    def _schedule_rows(self, doctor_id: int, weekday: int | None = None):
        query = self.db.query(DoctorSchedule, TimeSlot).join(
            TimeSlot, DoctorSchedule.slot_id == TimeSlot.slot_id,
        ).filter(
            DoctorSchedule.doctor_id == doctor_id,
            DoctorSchedule.is_active.is_(True),
        )
        if weekday is not None:
            query = query.filter(DoctorSchedule.day_of_week == weekday)

        return query.order_by(DoctorSchedule.day_of_week.asc(), TimeSlot.start_time.asc()).all()

    def _slot_views(self, doctor_id: int, target: date, rows) -> list[dict]:
        booked = booked_slot_ids(self.db, doctor_id, target)
        slots = []
        for schedule, slot in rows:
            is_available = schedule.slot_id not in booked
            slots.append({
                'schedule_id': schedule.schedule_id,
                'doctor_id': schedule.doctor_id,
                'slot_id': schedule.slot_id,
                'day_of_week': schedule.day_of_week,
                'start_time': slot.start_time,
                'end_time': slot.end_time,
                'is_available': is_available,
                'status': 'Available' if is_available else 'Booked',
            })
        return slots

    def resolve_availability(self, doctor_id: int, target: date | None) -> dict:
        if target is None:
            raise ValidationError('date query parameter is required (YYYY-MM-DD)')
        self.horizon.check(target)

        doctor = doctor_summary(self.db, doctor_id)
        if doctor is None:
            raise NotFoundError('Doctor not found')

        weekday = day_of_week(target)
        slots = self._slot_views(doctor_id, target, self._schedule_rows(doctor_id, weekday))
        logger.debug('Doctor %s has %d slots on %s (day %s)', doctor_id, len(slots), target, weekday)

        return {
            'doctor': doctor,
            'date': target,
            'day_of_week': weekday,
            'slots': slots,
            'available_count': sum(1 for slot in slots if slot['is_available']),
            'total_slots': len(slots),
        }

    def resolve_week_availability(self, doctor_id: int) -> dict:
        rows = self._schedule_rows(doctor_id)
        if not rows:
            raise NotFoundError('No active schedule found for this doctor')

        doctor = doctor_summary(self.db, doctor_id)
        if doctor is None:
            raise NotFoundError('Doctor not found')

        today = self.horizon.today()
        availability = []
        for offset in range(WEEK_LENGTH_DAYS):
            current_day = today + timedelta(days=offset)
            weekday = day_of_week(current_day)
            day_rows = [(schedule, slot) for schedule, slot in rows if schedule.day_of_week == weekday]
            if not day_rows:
                continue

            slots = self._slot_views(doctor_id, current_day, day_rows)
            availability.append({
                'date': current_day,
                'day_of_week': weekday,
                'day_name': DAY_NAMES[weekday],
                'slots': slots,
                'available_slots': sum(1 for slot in slots if slot['is_available']),
                'total_slots': len(slots),
            })

        return {
            'doctor': doctor,
            'schedule_period': {
                'from': today,
                'to': today + timedelta(days=WEEK_LENGTH_DAYS),
            },
            'availability': availability,
        }

    def slot_state(self, doctor_id: int, slot_id: int, target: date) -> tuple[SlotState, TimeSlot | None]:
        result = self.db.query(DoctorSchedule, TimeSlot).join(
            TimeSlot, DoctorSchedule.slot_id == TimeSlot.slot_id,
        ).filter(
            DoctorSchedule.doctor_id == doctor_id,
            DoctorSchedule.slot_id == slot_id,
            DoctorSchedule.day_of_week == day_of_week(target),
        ).first()

        if result is None:
            return SlotState.NOT_IN_SCHEDULE, None

        schedule, slot = result
        if not schedule.is_active:
            return SlotState.INACTIVE, slot
        if slot_id in booked_slot_ids(self.db, doctor_id, target):
            return SlotState.BOOKED, slot
        return SlotState.AVAILABLE, slot

    def check_slot_availability(self, doctor_id: int | None, slot_id: int | None, target: date | None) -> dict:
        if not all([doctor_id, slot_id, target]):
            raise ValidationError('doctor_id, slot_id, and appointment_date are required')

        horizon_violation = self.horizon.violation(target)
        if horizon_violation:
            return {'is_available': False, 'reason': horizon_violation}

        state, slot = self.slot_state(doctor_id, slot_id, target)
        if slot is None:
            return {'is_available': False, 'reason': NO_SCHEDULE_ROW_MESSAGE}

        return {
            'is_available': state is SlotState.AVAILABLE,
            'reason': state.value,
            'slot_details': {
                'start_time': slot.start_time,
                'end_time': slot.end_time,
            },
        }
