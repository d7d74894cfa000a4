import logging
from datetime import datetime, timedelta
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from medcare.core import config

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

SCHEDULED_STATUS_ID = 1
COMPLETED_STATUS_ID = 2
CANCELLED_STATUS_ID = 3

APPOINTMENT_STATUSES = {
    SCHEDULED_STATUS_ID: 'Scheduled',
    COMPLETED_STATUS_ID: 'Completed',
    CANCELLED_STATUS_ID: 'Cancelled',
}

_schema_lock = Lock()
_appointment_schema_checked = False


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def ensure_appointment_schema() -> None:
    """Create the booking uniqueness indexes on databases that predate them."""
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        create_appointment_indexes(engine)
        _appointment_schema_checked = True


def create_appointment_indexes(bind) -> None:
    inspector = inspect(bind)

    if 'appointments' not in inspector.get_table_names():
        return

    not_cancelled = f'WHERE status_id IS NULL OR status_id <> {CANCELLED_STATUS_ID}'
    with bind.begin() as connection:
        connection.execute(
            text(
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_doctor_slot_date '
                f'ON appointments(doctor_id, slot_id, appointment_date) {not_cancelled}'
            )
        )
        connection.execute(
            text(
                'CREATE UNIQUE INDEX IF NOT EXISTS uq_appointments_patient_doctor_date '
                f'ON appointments(patient_id, doctor_id, appointment_date) {not_cancelled}'
            )
        )
        connection.execute(
            text('CREATE INDEX IF NOT EXISTS idx_appointments_doctor_date ON appointments(doctor_id, appointment_date)')
        )


def seed_reference_data(db: Session) -> None:
    """Seed the appointment status enumeration and, if empty, the time-slot catalog."""
    from medcare.models.appointment import AppointmentStatus
    from medcare.models.time_slot import TimeSlot

    existing_statuses = {status_id for (status_id,) in db.query(AppointmentStatus.status_id).all()}
    for status_id, status_name in APPOINTMENT_STATUSES.items():
        if status_id not in existing_statuses:
            db.add(AppointmentStatus(status_id=status_id, status_name=status_name))
            logger.info('Seeded appointment status %s (%s)', status_id, status_name)

    if config.SEED_TIME_SLOTS and db.query(TimeSlot).count() == 0:
        slots = build_default_time_slots(config.SLOT_DAY_START, config.SLOT_DAY_END, config.SLOT_LENGTH_MINUTES)
        db.add_all(slots)
        logger.info('Seeded %d default time slots', len(slots))

    db.commit()


def build_default_time_slots(day_start, day_end, slot_length_minutes: int) -> list:
    from medcare.models.time_slot import TimeSlot

    reference_day = datetime(2000, 1, 1)
    current = datetime.combine(reference_day, day_start)
    closing = datetime.combine(reference_day, day_end)
    step = timedelta(minutes=slot_length_minutes)

    slots = []
    slot_number = 1
    while current + step <= closing:
        slots.append(
            TimeSlot(
                slot_id=slot_number,
                slot_number=slot_number,
                start_time=current.time(),
                end_time=(current + step).time(),
            )
        )
        current += step
        slot_number += 1

    return slots
