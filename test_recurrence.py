"""
Tests for recurrence expansion and per-occurrence conflict reports.
"""

from datetime import date

import pytest

from timetable.scheduling import (
    ConflictType, InMemorySlotRepository, InvalidRecurrenceError, Recurrence, RecurrenceCadence,
    RecurrenceExpander, SlotType, TimeSlot, expand_recurrence, occurrence_dates, weekday_index,
)


def origin(on, cadence, until, id=None, **fields):
    defaults = dict(room_id="R1", professor_id="P1", course_id="C1", class_id="K1",
                    start_time="09:00", end_time="10:00")
    defaults.update(fields)
    return TimeSlot(
        day=weekday_index(on),
        date=on,
        recurrence=Recurrence(cadence=cadence, until=until),
        id=id,
        **defaults,
    )


def test_weekly_expansion_excludes_origin_and_includes_until():
    occurrences = expand_recurrence(origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 1, 22)))
    assert [o.date for o in occurrences] == [date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)]
    assert {o.day for o in occurrences} == {1}


def test_biweekly_expansion():
    dates = occurrence_dates(date(2024, 1, 1), Recurrence(RecurrenceCadence.BIWEEKLY, date(2024, 2, 1)))
    assert dates == [date(2024, 1, 15), date(2024, 1, 29)]


def test_monthly_expansion_clamps_to_month_end_without_drift():
    occurrences = expand_recurrence(origin(date(2024, 1, 31), RecurrenceCadence.MONTHLY, date(2024, 4, 30)))
    assert [o.date for o in occurrences] == [date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30)]
    # Monthly occurrences land on different weekdays; each carries its own
    assert [o.day for o in occurrences] == [4, 0, 2]


def test_occurrences_inherit_from_origin():
    source = origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 1, 8), id=42, type=SlotType.EXAM)
    (occurrence,) = expand_recurrence(source)

    assert (occurrence.room_id, occurrence.professor_id, occurrence.course_id, occurrence.class_id) == ("R1", "P1", "C1", "K1")
    assert (occurrence.start_time, occurrence.end_time, occurrence.type) == ("09:00", "10:00", SlotType.EXAM)
    assert occurrence.id is None
    assert occurrence.recurrence is None
    assert occurrence.recurrence_parent_id == 42


def test_expansion_is_restartable():
    source = origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 3, 1))
    assert expand_recurrence(source) == expand_recurrence(source)


def test_until_on_origin_date_is_rejected():
    with pytest.raises(InvalidRecurrenceError) as excinfo:
        expand_recurrence(origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 1, 1)))
    assert excinfo.value.field == "recurrence.until"


def test_open_ended_series_stops_at_horizon():
    source = origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, None)
    assert len(expand_recurrence(source, horizon_days=28)) == 4


def test_non_recurring_slot_expands_to_nothing():
    slot = TimeSlot(room_id="R1", professor_id="P1", day=1, start_time="09:00", end_time="10:00", date=date(2024, 1, 1))
    assert expand_recurrence(slot) == []
    assert RecurrenceExpander(InMemorySlotRepository()).expand(slot).occurrences == []


def test_until_before_origin_date_is_rejected():
    with pytest.raises(InvalidRecurrenceError):
        expand_recurrence(origin(date(2024, 1, 10), RecurrenceCadence.WEEKLY, date(2024, 1, 1)))


def test_unrecognized_cadence_is_rejected():
    with pytest.raises(InvalidRecurrenceError):
        expand_recurrence(origin(date(2024, 1, 1), "DAILY", date(2024, 2, 1)))
    with pytest.raises(InvalidRecurrenceError):
        RecurrenceCadence.parse("YEARLY")


def test_cadence_parsing_is_case_insensitive():
    assert RecurrenceCadence.parse("biweekly") == RecurrenceCadence.BIWEEKLY
    assert RecurrenceCadence.parse(RecurrenceCadence.MONTHLY) == RecurrenceCadence.MONTHLY


def test_expander_reports_conflicting_occurrences_without_skipping():
    # Sunday booking in the same room: only the 2024-03-31 occurrence falls on a Sunday
    sunday = TimeSlot(room_id="R1", professor_id="P7", day=0, start_time="09:30", end_time="11:00", id=99)
    repo = InMemorySlotRepository([sunday])

    report = RecurrenceExpander(repo).expand(origin(date(2024, 1, 31), RecurrenceCadence.MONTHLY, date(2024, 4, 30)))

    assert len(report.occurrences) == 3
    assert report.has_conflicts
    (conflicting,) = report.conflicting()
    assert conflicting.occurrence.date == date(2024, 3, 31)
    assert [c.type for c in conflicting.conflicts] == [ConflictType.ROOM]
    assert conflicting.conflicts[0].slots == [sunday]
    assert [o.date for o in report.clean()] == [date(2024, 2, 29), date(2024, 4, 30)]


def test_expander_does_not_flag_the_stored_origin():
    source = origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 1, 29), id=1)
    repo = InMemorySlotRepository()
    repo.add(source)

    report = RecurrenceExpander(repo).expand(source)

    assert len(report.occurrences) == 4
    assert not report.has_conflicts


def test_batch_occurrences_on_the_same_date_collide():
    first = TimeSlot(room_id="R1", professor_id="P1", day=1, start_time="09:00", end_time="10:00", date=date(2024, 1, 8))
    same_date = first.reschedule(professor_id="P2", start_time="09:30", end_time="10:30")
    other_date = first.reschedule(date=date(2024, 1, 15))

    conflicts = RecurrenceExpander._batch_conflicts(same_date, [first])
    assert [c.type for c in conflicts] == [ConflictType.ROOM]
    assert RecurrenceExpander._batch_conflicts(other_date, [first]) == []


def test_expansion_report_to_dict():
    report = RecurrenceExpander(InMemorySlotRepository()).expand(
        origin(date(2024, 1, 1), RecurrenceCadence.WEEKLY, date(2024, 1, 15))
    )
    data = report.to_dict()
    assert data["total"] == 2
    assert data["conflicting"] == 0
    assert [o["occurrence"]["date"] for o in data["occurrences"]] == ["2024-01-08", "2024-01-15"]
    assert data["origin"]["date"] == "2024-01-01"
