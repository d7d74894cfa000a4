from sqlalchemy.orm import Session

from medcare.models.time_slot import TimeSlot


class TimeSlotCatalog:
    """Read-only view of the shared time-slot reference table."""

    def __init__(self, db: Session):
        self.db = db

    def list_slots(self) -> list[TimeSlot]:
        return self.db.query(TimeSlot).order_by(TimeSlot.slot_number.asc()).all()

    def get_slot(self, slot_id: int) -> TimeSlot | None:
        return self.db.query(TimeSlot).filter(TimeSlot.slot_id == slot_id).first()
