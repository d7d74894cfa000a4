"""Consultation model definitions."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from medcare.database import Base


class Consultation(Base):
    """Represents a doctor's consultation for an appointment."""
    __tablename__ = "consultations"

    consultation_id = Column(Integer, primary_key=True)
    appointment_id = Column(Integer, ForeignKey("appointments.appointment_id"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.doctor_id"), nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.patient_id"), nullable=False)
    blood_pressure = Column(String(20))
    temperature = Column(Numeric(4, 2))
    oxygen_saturation = Column(Integer)
    diagnosis = Column(String(500))
    consultation_date = Column(DateTime, nullable=False, default=datetime.now)
