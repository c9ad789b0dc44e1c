"""
Slot helper functions shared by the conflict detector, the recurrence
expander and the room queries.
"""

from typing import Iterable, List


def intervals_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Half-open overlap test on HH:MM strings; touching intervals do not overlap."""
    return start_a < end_b and end_a > start_b


def overlapping_slots(candidate, slots: Iterable, exclude_id=None, same_date: bool = False) -> List:
    """Return the scheduled slots whose time range intersects the candidate's."""
    overlapping = []
    for slot in slots:
        if not slot.is_scheduled:
            continue
        if exclude_id is not None and slot.id == exclude_id:
            continue
        if slot.day != candidate.day:
            continue
        if same_date and slot.date != candidate.date:
            continue
        if intervals_overlap(slot.start_time, slot.end_time, candidate.start_time, candidate.end_time):
            overlapping.append(slot)
    return overlapping


def minutes_of(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def slot_duration_hours(slot) -> float:
    return (minutes_of(slot.end_time) - minutes_of(slot.start_time)) / 60
