"""
Conflict detection for candidate time slots.

A candidate collides with an existing slot when both are scheduled for the
same room (or the same professor) on the same weekday and their
``[start, end)`` intervals intersect.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, List

from .time_slot import TimeSlot, validate_slot
from ..utils.slot_utils import overlapping_slots

logger = logging.getLogger(__name__)


class ConflictType(str, enum.Enum):
    ROOM = "ROOM"
    PROFESSOR = "PROFESSOR"


CONFLICT_MESSAGES = {
    ConflictType.ROOM: "Room already booked for this time slot",
    ConflictType.PROFESSOR: "Professor already busy during this time slot",
}


@dataclass
class Conflict:
    type: ConflictType
    message: str
    slots: List[TimeSlot] = field(default_factory=list)

    @classmethod
    def of(cls, conflict_type: ConflictType, slots: List[TimeSlot]) -> "Conflict":
        return cls(type=conflict_type, message=CONFLICT_MESSAGES[conflict_type], slots=list(slots))


class ConflictDetector:
    """Read-only conflict checks against a slot repository."""

    def __init__(self, repository):
        self.repository = repository

    def detect_conflicts(self, candidate, exclude_id: Any = None) -> List[Conflict]:
        """
        Find scheduled slots colliding with the candidate.

        Returns at most two conflicts, room first then professor. ``exclude_id``
        keeps an updated slot from colliding with its own stored version.
        Raises InvalidSlotError before any repository query when the candidate
        is malformed.
        """
        validate_slot(candidate)

        conflicts = []
        if candidate.room_id is not None:
            existing = self.repository.find_scheduled_slots(room_id=candidate.room_id, day=candidate.day)
            room_hits = overlapping_slots(candidate, existing, exclude_id=exclude_id)
            if room_hits:
                conflicts.append(Conflict.of(ConflictType.ROOM, room_hits))

        if candidate.professor_id is not None:
            existing = self.repository.find_scheduled_slots(professor_id=candidate.professor_id, day=candidate.day)
            professor_hits = overlapping_slots(candidate, existing, exclude_id=exclude_id)
            if professor_hits:
                conflicts.append(Conflict.of(ConflictType.PROFESSOR, professor_hits))

        if conflicts:
            logger.debug(
                f"Candidate day={candidate.day} {candidate.start_time}-{candidate.end_time} "
                f"has {len(conflicts)} conflict(s): {[c.type.value for c in conflicts]}"
            )
        return conflicts


def detect_conflicts(repository, candidate, exclude_id: Any = None) -> List[Conflict]:
    return ConflictDetector(repository).detect_conflicts(candidate, exclude_id=exclude_id)


def merge_conflicts(primary: List[Conflict], extra: List[Conflict]) -> List[Conflict]:
    """Fold ``extra`` into ``primary`` by conflict type, keeping room before professor."""
    by_type = {conflict.type: Conflict(conflict.type, conflict.message, list(conflict.slots)) for conflict in primary}
    for conflict in extra:
        if conflict.type in by_type:
            by_type[conflict.type].slots.extend(conflict.slots)
        else:
            by_type[conflict.type] = Conflict(conflict.type, conflict.message, list(conflict.slots))
    return [by_type[t] for t in (ConflictType.ROOM, ConflictType.PROFESSOR) if t in by_type]
