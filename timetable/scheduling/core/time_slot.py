"""
Time slot representation for the scheduling core.
"""

import enum
import re
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Optional

from .errors import InvalidSlotError, InvalidRecurrenceError

TIME_PATTERN = re.compile(r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$")


class SlotType(str, enum.Enum):
    COURSE = "COURSE"
    EXAM = "EXAM"
    EVENT = "EVENT"


class SlotStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CANCELLED = "CANCELLED"   # Terminal; never participates in conflict checks
    COMPLETED = "COMPLETED"


class RecurrenceCadence(str, enum.Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"

    @classmethod
    def parse(cls, value) -> "RecurrenceCadence":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise InvalidRecurrenceError(f"Unrecognized recurrence cadence: {value!r}", field="recurrence.type")


def weekday_index(day_date: date) -> int:
    """Weekday of a calendar date, 0 = Sunday through 6 = Saturday."""
    return (day_date.weekday() + 1) % 7


@dataclass(frozen=True)
class Recurrence:
    cadence: RecurrenceCadence
    until: Optional[date] = None


@dataclass(frozen=True)
class TimeSlotCandidate:
    """What a conflict check needs to know about a proposed slot."""
    day: int
    start_time: str
    end_time: str
    room_id: Any = None
    professor_id: Any = None
    date: Optional[date] = None


@dataclass(frozen=True)
class TimeSlot:
    """
    A scheduled occupation of a room by a professor for a course section.

    Room, professor, course and class are opaque keys resolved by the caller.
    """
    room_id: Any
    professor_id: Any
    day: int
    start_time: str
    end_time: str
    date: Optional[date] = None
    course_id: Any = None
    class_id: Any = None
    type: SlotType = SlotType.COURSE
    status: SlotStatus = SlotStatus.SCHEDULED
    recurrence: Optional[Recurrence] = None
    id: Any = None
    recurrence_parent_id: Any = None

    @property
    def is_scheduled(self) -> bool:
        return self.status == SlotStatus.SCHEDULED

    def reschedule(self, **changes) -> "TimeSlot":
        """Copy of this slot with the given fields changed."""
        return replace(self, **changes)

    def __repr__(self):
        when = self.date.isoformat() if self.date else f"day {self.day}"
        return f"TimeSlot(id={self.id}, room={self.room_id}, professor={self.professor_id}, {when} {self.start_time}-{self.end_time}, {self.status.value})"


def validate_slot(candidate) -> None:
    """
    Check the time range and weekday of a slot or candidate.

    Raises InvalidSlotError on the first malformed field.
    """
    for field in ("start_time", "end_time"):
        value = getattr(candidate, field)
        if not isinstance(value, str) or not TIME_PATTERN.match(value):
            raise InvalidSlotError(f"{field} must be a zero-padded HH:MM time, got {value!r}", field=field)

    # Fixed-width HH:MM strings order the same way as the times they encode
    if candidate.start_time >= candidate.end_time:
        raise InvalidSlotError(
            f"start_time {candidate.start_time} must be before end_time {candidate.end_time}",
            field="end_time",
        )

    day = candidate.day
    if not isinstance(day, int) or isinstance(day, bool) or not 0 <= day <= 6:
        raise InvalidSlotError(f"day must be between 0 and 6, got {day!r}", field="day")
