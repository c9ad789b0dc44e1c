"""
Recurrence expansion using dateutil.relativedelta.

Occurrence n is origin + n steps, never the previous occurrence + 1 step,
so monthly series clamp to short months without drifting:
Jan 31 -> Feb 29 -> Mar 31 -> Apr 30.
"""

import logging
from datetime import date, timedelta
from typing import List

from dateutil.relativedelta import relativedelta

from .conflicts import ConflictDetector, Conflict, ConflictType, merge_conflicts
from .errors import InvalidRecurrenceError
from .time_slot import TimeSlot, Recurrence, RecurrenceCadence, SlotStatus, validate_slot, weekday_index
from ..reporting import ExpansionReport, OccurrenceReport
from ..utils.slot_utils import overlapping_slots

logger = logging.getLogger(__name__)

# Upper bound for series without an end date
DEFAULT_HORIZON_DAYS = 180

CADENCE_STEPS = {
    RecurrenceCadence.WEEKLY: relativedelta(weeks=1),
    RecurrenceCadence.BIWEEKLY: relativedelta(weeks=2),
    RecurrenceCadence.MONTHLY: relativedelta(months=1),
}


def _check_recurrence(origin_date: date, recurrence: Recurrence) -> RecurrenceCadence:
    if origin_date is None:
        raise InvalidRecurrenceError("A recurring slot needs a calendar date", field="date")
    cadence = RecurrenceCadence.parse(recurrence.cadence)
    if recurrence.until is not None and recurrence.until <= origin_date:
        raise InvalidRecurrenceError(
            f"Recurrence end {recurrence.until.isoformat()} must fall after slot date {origin_date.isoformat()}",
            field="recurrence.until",
        )
    return cadence


def occurrence_dates(origin_date: date, recurrence: Recurrence, horizon_days: int = DEFAULT_HORIZON_DAYS) -> List[date]:
    """Dates of the occurrences after ``origin_date``, up to and including ``until``."""
    cadence = _check_recurrence(origin_date, recurrence)
    until = recurrence.until or origin_date + timedelta(days=horizon_days)
    step = CADENCE_STEPS[cadence]

    dates = []
    n = 1
    while True:
        current = origin_date + step * n
        if current > until:
            break
        dates.append(current)
        n += 1
    return dates


def expand_recurrence(origin: TimeSlot, horizon_days: int = DEFAULT_HORIZON_DAYS) -> List[TimeSlot]:
    """
    Generate the dated occurrences of a recurring slot, origin excluded.

    Each occurrence inherits room, professor, course, class, times and type
    from the origin, and carries its own date and the weekday of that date.
    """
    if origin.recurrence is None:
        return []

    validate_slot(origin)
    return [
        origin.reschedule(
            id=None,
            date=occurrence_date,
            day=weekday_index(occurrence_date),
            status=SlotStatus.SCHEDULED,
            recurrence=None,
            recurrence_parent_id=origin.id,
        )
        for occurrence_date in occurrence_dates(origin.date, origin.recurrence, horizon_days)
    ]


class RecurrenceExpander:
    """Expands a recurring slot and checks every occurrence for conflicts."""

    def __init__(self, repository, horizon_days: int = DEFAULT_HORIZON_DAYS):
        self.repository = repository
        self.detector = ConflictDetector(repository)
        self.horizon_days = horizon_days

    def expand(self, origin: TimeSlot):
        """
        Expand ``origin`` and attach the conflicts of each occurrence.

        Occurrences are checked one after another against the repository and
        against the occurrences generated before them in this batch. Nothing
        is skipped: the caller decides what to do with conflicting occurrences.
        """
        if origin.recurrence is None:
            return ExpansionReport(origin=origin, occurrences=[])

        occurrences = expand_recurrence(origin, self.horizon_days)
        reports = []
        generated: List[TimeSlot] = []

        for occurrence in occurrences:
            conflicts = self.detector.detect_conflicts(occurrence, exclude_id=origin.id)
            batch_conflicts = self._batch_conflicts(occurrence, generated)
            if batch_conflicts:
                conflicts = merge_conflicts(conflicts, batch_conflicts)
            reports.append(OccurrenceReport(occurrence=occurrence, conflicts=conflicts))
            generated.append(occurrence)

        report = ExpansionReport(origin=origin, occurrences=reports)
        logger.info(
            f"Expanded {RecurrenceCadence.parse(origin.recurrence.cadence).value} series from {origin.date}: "
            f"{len(reports)} occurrence(s), {len(report.conflicting())} with conflicts"
        )
        return report

    @staticmethod
    def _batch_conflicts(occurrence: TimeSlot, generated: List[TimeSlot]) -> List[Conflict]:
        # Occurrences of one batch are all dated, so they only collide on the same date
        conflicts = []
        same_date = overlapping_slots(occurrence, generated, same_date=True)
        room_hits = [s for s in same_date if s.room_id == occurrence.room_id]
        if room_hits:
            conflicts.append(Conflict.of(ConflictType.ROOM, room_hits))
        professor_hits = [s for s in same_date if s.professor_id == occurrence.professor_id]
        if professor_hits:
            conflicts.append(Conflict.of(ConflictType.PROFESSOR, professor_hits))
        return conflicts
