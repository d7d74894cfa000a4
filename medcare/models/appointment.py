"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, text
from medcare.database import Base, CANCELLED_STATUS_ID, SCHEDULED_STATUS_ID

_NOT_CANCELLED = text(f"status_id IS NULL OR status_id <> {CANCELLED_STATUS_ID}")


class AppointmentStatus(Base):
    """Represents one value of the closed appointment status enumeration."""
    __tablename__ = "appointment_statuses"

    status_id = Column(Integer, primary_key=True, autoincrement=False)
    status_name = Column(String(30), nullable=False)


class Appointment(Base):
    """Represents a patient's booking of a doctor's slot on a calendar date."""
    __tablename__ = "appointments"

    appointment_id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.patient_id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("doctors.doctor_id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    slot_id = Column(Integer, ForeignKey("time_slots.slot_id"), nullable=False)
    status_id = Column(Integer, ForeignKey("appointment_statuses.status_id"), default=SCHEDULED_STATUS_ID)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    # Cancelled rows do not occupy a slot.
    __table_args__ = (
        Index(
            "uq_appointments_doctor_slot_date",
            "doctor_id",
            "slot_id",
            "appointment_date",
            unique=True,
            sqlite_where=_NOT_CANCELLED,
            postgresql_where=_NOT_CANCELLED,
        ),
        Index(
            "uq_appointments_patient_doctor_date",
            "patient_id",
            "doctor_id",
            "appointment_date",
            unique=True,
            sqlite_where=_NOT_CANCELLED,
            postgresql_where=_NOT_CANCELLED,
        ),
        Index("idx_appointments_doctor_date", "doctor_id", "appointment_date"),
    )
