"""Time slot model definitions."""

from sqlalchemy import Column, Integer, Time
from medcare.database import Base


class TimeSlot(Base):
    """Represents a bookable time-of-day window shared by all doctors."""
    __tablename__ = "time_slots"

    slot_id = Column(Integer, primary_key=True)
    slot_number = Column(Integer, nullable=False, unique=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
