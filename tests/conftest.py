import os
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from medcare.database import Base, SCHEDULED_STATUS_ID, seed_reference_data  # noqa: E402
from medcare.models.appointment import Appointment  # noqa: E402
from medcare.models.appointment_form import AppointmentForm  # noqa: E402, F401
from medcare.models.consultation import Consultation  # noqa: E402, F401
from medcare.models.people import Doctor, Patient, Specialization  # noqa: E402
from medcare.models.schedule import DoctorSchedule  # noqa: E402
from medcare.services.availability import BookingHorizon  # noqa: E402

# A Monday.
TODAY = date(2026, 10, 19)


class Records:
    """Inserts the rows that registration and reference-data handlers own."""

    def __init__(self, db):
        self.db = db

    def specialization(self, specialization_id=1, name='Cardiology'):
        specialization = self.db.get(Specialization, specialization_id)
        if specialization is None:
            specialization = Specialization(specialization_id=specialization_id, specialization_name=name)
            self.db.add(specialization)
            self.db.commit()
        return specialization

    def doctor(self, doctor_id, first_name='Gregory', last_name='House', fee=Decimal('75.00'), room_no='B12'):
        self.specialization()
        doctor = Doctor(
            doctor_id=doctor_id,
            first_name=first_name,
            last_name=last_name,
            specialization_id=1,
            consultation_fee=fee,
            room_no=room_no,
        )
        self.db.add(doctor)
        self.db.commit()
        return doctor

    def patient(self, patient_id, first_name='Ada', last_name='Lovelace', phone_no='555-0100'):
        patient = Patient(patient_id=patient_id, first_name=first_name, last_name=last_name, phone_no=phone_no)
        self.db.add(patient)
        self.db.commit()
        return patient

    def schedule(self, doctor_id, day_of_week, slot_id, is_active=True):
        schedule = DoctorSchedule(doctor_id=doctor_id, day_of_week=day_of_week, slot_id=slot_id, is_active=is_active)
        self.db.add(schedule)
        self.db.commit()
        return schedule

    def appointment(self, patient_id, doctor_id, appointment_date, slot_id, status_id=SCHEDULED_STATUS_ID):
        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            slot_id=slot_id,
            status_id=status_id,
        )
        self.db.add(appointment)
        self.db.commit()
        return appointment


@pytest.fixture
def engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    db = session_factory()
    seed_reference_data(db)
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def records(db):
    return Records(db)


@pytest.fixture
def horizon():
    return BookingHorizon(today=lambda: TODAY, days=7)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_records():
    return Records
