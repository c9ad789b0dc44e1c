"""
Result aggregation for conflict checks and recurrence expansion.

Shapes core results into plain dicts for JSON responses.
"""

from dataclasses import dataclass, field
from typing import List

from .core.conflicts import Conflict
from .core.time_slot import TimeSlot


def slot_to_dict(slot: TimeSlot) -> dict:
    return {
        "id": slot.id,
        "room_id": slot.room_id,
        "professor_id": slot.professor_id,
        "course_id": slot.course_id,
        "class_id": slot.class_id,
        "date": slot.date.isoformat() if slot.date else None,
        "day": slot.day,
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "type": slot.type.value,
        "status": slot.status.value,
        "recurrence_parent_id": slot.recurrence_parent_id,
    }


def conflicts_to_dict(conflicts: List[Conflict]) -> List[dict]:
    return [
        {
            "type": conflict.type.value,
            "message": conflict.message,
            "slots": [slot_to_dict(slot) for slot in conflict.slots],
        }
        for conflict in conflicts
    ]


@dataclass
class OccurrenceReport:
    occurrence: TimeSlot
    conflicts: List[Conflict] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def to_dict(self) -> dict:
        return {
            "occurrence": slot_to_dict(self.occurrence),
            "conflicts": conflicts_to_dict(self.conflicts),
        }


@dataclass
class ExpansionReport:
    """Every generated occurrence of a series, each with its own conflicts."""
    origin: TimeSlot
    occurrences: List[OccurrenceReport] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return any(report.has_conflicts for report in self.occurrences)

    def clean(self) -> List[TimeSlot]:
        return [report.occurrence for report in self.occurrences if not report.has_conflicts]

    def conflicting(self) -> List[OccurrenceReport]:
        return [report for report in self.occurrences if report.has_conflicts]

    def to_dict(self) -> dict:
        return {
            "origin": slot_to_dict(self.origin),
            "total": len(self.occurrences),
            "conflicting": len(self.conflicting()),
            "occurrences": [report.to_dict() for report in self.occurrences],
        }
