"""
Tests for the conflict detector against the in-memory slot repository.
"""

from unittest.mock import Mock

import pytest

from timetable.scheduling import (
    ConflictDetector, ConflictType, InMemorySlotRepository, InvalidSlotError, SlotRepository,
    SlotStatus, TimeSlot, TimeSlotCandidate, detect_conflicts,
)
from timetable.scheduling.utils.slot_utils import intervals_overlap


def slot(start, end, room="R1", professor="P1", day=1, id=None, status=SlotStatus.SCHEDULED):
    return TimeSlot(room_id=room, professor_id=professor, day=day, start_time=start, end_time=end, id=id, status=status)


def test_touching_intervals_do_not_conflict():
    repo = InMemorySlotRepository([slot("09:00", "10:00", id=1)])
    assert detect_conflicts(repo, slot("10:00", "11:00", professor="P2")) == []
    assert detect_conflicts(repo, slot("08:00", "09:00", professor="P2")) == []


def test_overlapping_intervals_report_room_conflict():
    existing = slot("09:00", "10:00", id=1)
    repo = InMemorySlotRepository([existing])

    conflicts = detect_conflicts(repo, slot("09:30", "10:30", professor="P2"))

    assert len(conflicts) == 1
    assert conflicts[0].type == ConflictType.ROOM
    assert conflicts[0].slots == [existing]
    assert conflicts[0].message


def test_same_professor_different_room_reports_professor_conflict_only():
    existing = slot("09:00", "10:00", room="R1", id=1)
    repo = InMemorySlotRepository([existing])

    conflicts = detect_conflicts(repo, slot("09:30", "10:30", room="R2"))

    assert [c.type for c in conflicts] == [ConflictType.PROFESSOR]
    assert conflicts[0].slots == [existing]


def test_room_conflict_listed_before_professor_conflict():
    repo = InMemorySlotRepository([slot("09:00", "10:00", id=1)])
    conflicts = detect_conflicts(repo, slot("09:15", "09:45"))
    assert [c.type for c in conflicts] == [ConflictType.ROOM, ConflictType.PROFESSOR]


def test_other_weekday_and_cancelled_slots_are_ignored():
    repo = InMemorySlotRepository([
        slot("09:00", "10:00", day=2, id=1),
        slot("09:00", "10:00", id=2, status=SlotStatus.CANCELLED),
        slot("09:00", "10:00", id=3, status=SlotStatus.COMPLETED),
    ])
    assert detect_conflicts(repo, slot("09:00", "10:00")) == []


def test_exclude_id_suppresses_self_collision():
    stored = slot("09:00", "10:00", id=7)
    repo = InMemorySlotRepository([stored])

    moved = stored.reschedule(start_time="09:30", end_time="10:30")

    assert detect_conflicts(repo, moved, exclude_id=7) == []
    assert [c.type for c in detect_conflicts(repo, moved)] == [ConflictType.ROOM, ConflictType.PROFESSOR]


def test_exclude_id_keeps_other_collisions():
    repo = InMemorySlotRepository([slot("09:00", "10:00", id=7), slot("10:00", "11:00", room="R1", professor="P9", id=8)])
    conflicts = detect_conflicts(repo, slot("09:30", "10:30", id=7), exclude_id=7)
    assert len(conflicts) == 1
    assert conflicts[0].type == ConflictType.ROOM
    assert [s.id for s in conflicts[0].slots] == [8]


def test_detection_is_repeatable_without_mutation():
    repo = InMemorySlotRepository([slot("09:00", "10:00", id=1), slot("09:30", "11:00", room="R2", id=2)])
    before = list(repo.slots)
    candidate = slot("09:45", "10:15")

    first = detect_conflicts(repo, candidate)
    second = detect_conflicts(repo, candidate)

    assert first == second
    assert repo.slots == before


def test_candidate_without_room_only_checks_professor():
    repo = InMemorySlotRepository([slot("09:00", "10:00", id=1)])
    candidate = TimeSlotCandidate(day=1, start_time="09:00", end_time="09:30", professor_id="P1")

    conflicts = ConflictDetector(repo).detect_conflicts(candidate)

    assert [c.type for c in conflicts] == [ConflictType.PROFESSOR]
    assert all(call["room_id"] is None for call in repo.calls)


@pytest.mark.parametrize("start,end,day,field", [
    ("10:00", "09:00", 1, "end_time"),
    ("10:00", "10:00", 1, "end_time"),
    ("9:00", "10:00", 1, "start_time"),
    ("09:00", "24:00", 1, "end_time"),
    ("09:00", "10:00", 7, "day"),
    ("09:00", "10:00", -1, "day"),
])
def test_invalid_candidates_fail_before_any_query(start, end, day, field):
    repo = Mock(spec=SlotRepository)

    with pytest.raises(InvalidSlotError) as excinfo:
        ConflictDetector(repo).detect_conflicts(slot(start, end, day=day))

    assert excinfo.value.field == field
    assert repo.find_scheduled_slots.call_count == 0


def test_room_conflict_iff_half_open_intervals_intersect():
    times = ["08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00"]
    existing = slot("09:00", "10:00", id=1)
    repo = InMemorySlotRepository([existing])

    for i, start in enumerate(times):
        for end in times[i + 1:]:
            conflicts = detect_conflicts(repo, slot(start, end, professor="P2"))
            expected = start < "10:00" and end > "09:00"
            assert bool(conflicts) == expected, (start, end)
            assert intervals_overlap(start, end, "09:00", "10:00") == expected
