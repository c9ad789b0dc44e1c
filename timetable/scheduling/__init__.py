"""
Timetable Scheduling Core

Conflict detection and recurrence expansion for classroom time slots.
Works against any SlotRepository; persistence, authentication and
notification stay with the caller.
"""

from .core.time_slot import (
    TimeSlot, TimeSlotCandidate, Recurrence, RecurrenceCadence, SlotType, SlotStatus,
    validate_slot, weekday_index,
)
from .core.errors import SchedulingError, InvalidSlotError, InvalidRecurrenceError
from .core.conflicts import Conflict, ConflictType, ConflictDetector, detect_conflicts
from .core.recurrence import RecurrenceExpander, expand_recurrence, occurrence_dates
from .reporting import ExpansionReport, OccurrenceReport, conflicts_to_dict, slot_to_dict
from .repository import SlotRepository, InMemorySlotRepository, SqlAlchemySlotRepository

# Version for future API compatibility
__version__ = "1.0.0"
