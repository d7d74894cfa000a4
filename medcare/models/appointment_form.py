"""Appointment intake form model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from medcare.database import Base


class AppointmentForm(Base):
    """Represents the symptoms a patient submits ahead of an appointment."""
    __tablename__ = "appointment_forms"

    form_id = Column(Integer, primary_key=True)
    # One form per appointment.
    appointment_id = Column(Integer, ForeignKey("appointments.appointment_id"), nullable=False, unique=True)
    patient_id = Column(Integer, ForeignKey("patients.patient_id"), nullable=False, index=True)
    symptoms = Column(String(1000), nullable=False)
    medical_history = Column(String(1000))
    created_at = Column(DateTime, nullable=False, default=datetime.now)
