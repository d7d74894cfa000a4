"""Patient, doctor and specialization model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from medcare.database import Base


class Specialization(Base):
    """Represents a medical specialization."""
    __tablename__ = "specializations"

    specialization_id = Column(Integer, primary_key=True)
    specialization_name = Column(String(100), nullable=False, unique=True)


class Doctor(Base):
    """Represents a doctor who can be scheduled for appointments."""
    __tablename__ = "doctors"

    doctor_id = Column(Integer, primary_key=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    specialization_id = Column(Integer, ForeignKey("specializations.specialization_id"), nullable=False)
    consultation_fee = Column(Numeric(10, 2), default=0)
    phone_no = Column(String(20))
    room_no = Column(String(20))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Patient(Base):
    """Represents a registered patient."""
    __tablename__ = "patients"

    patient_id = Column(Integer, primary_key=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    phone_no = Column(String(20))

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
