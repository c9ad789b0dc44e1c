"""
Slot repositories: the read contract the scheduling core depends on.

The core only ever reads scheduled slots. Persisting validated slots and
generated occurrences is up to the caller.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from sqlalchemy.orm import Session

from .core.time_slot import TimeSlot, SlotStatus


class SlotRepository(ABC):

    @abstractmethod
    def find_scheduled_slots(self, room_id: Any = None, professor_id: Any = None, day: Optional[int] = None) -> List[TimeSlot]:
        """Scheduled slots matching every filter that is given, as of the time of the call."""


class InMemorySlotRepository(SlotRepository):
    """List-backed repository for tests and dry runs."""

    def __init__(self, slots: Iterable[TimeSlot] = ()):
        self.slots: List[TimeSlot] = list(slots)
        self.calls: List[dict] = []

    def add(self, slot: TimeSlot) -> TimeSlot:
        self.slots.append(slot)
        return slot

    def find_scheduled_slots(self, room_id=None, professor_id=None, day=None) -> List[TimeSlot]:
        self.calls.append({"room_id": room_id, "professor_id": professor_id, "day": day})
        return [
            slot for slot in self.slots
            if slot.status == SlotStatus.SCHEDULED
            and (room_id is None or slot.room_id == room_id)
            and (professor_id is None or slot.professor_id == professor_id)
            and (day is None or slot.day == day)
        ]


class SqlAlchemySlotRepository(SlotRepository):
    """Reads scheduled slots from the ``time_slots`` table."""

    def __init__(self, db: Session):
        self.db = db

    def find_scheduled_slots(self, room_id=None, professor_id=None, day=None) -> List[TimeSlot]:
        from ..models import TimeSlot as TimeSlotRecord

        query = self.db.query(TimeSlotRecord).filter(TimeSlotRecord.status == SlotStatus.SCHEDULED)
        if room_id is not None:
            query = query.filter(TimeSlotRecord.room_id == room_id)
        if professor_id is not None:
            query = query.filter(TimeSlotRecord.professor_id == professor_id)
        if day is not None:
            query = query.filter(TimeSlotRecord.day == day)

        records = query.order_by(TimeSlotRecord.start_time.asc(), TimeSlotRecord.id.asc()).all()
        return [record.to_domain() for record in records]
