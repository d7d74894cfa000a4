"""Doctor schedule model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, SmallInteger, UniqueConstraint
from medcare.database import Base


class DoctorSchedule(Base):
    """Represents a recurring weekly slot in a doctor's availability."""
    __tablename__ = "doctor_schedules"

    schedule_id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.doctor_id"), nullable=False)
    day_of_week = Column(SmallInteger, nullable=False)  # 0 = Sunday
    slot_id = Column(Integer, ForeignKey("time_slots.slot_id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime)

    __table_args__ = (
        UniqueConstraint("doctor_id", "day_of_week", "slot_id", name="uq_doctor_schedules_doctor_day_slot"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_doctor_schedules_day_of_week"),
    )
