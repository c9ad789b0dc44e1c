"""
Schedule service: the caller-side policy around the scheduling core.

The core reports conflicts and generated occurrences; this service decides
what gets persisted, who may change what, and when participants are notified.
"""

import logging
from collections import Counter
from datetime import datetime, date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..celery_tasks.notifications import notify_participants
from ..config import RECURRENCE_HORIZON_DAYS
from ..errors import ScheduleError, NotFoundError, PermissionDeniedError, SchedulingConflictError
from ..models import User, UserRole, Room, RoomFacility, RoomStatus, TimeSlot, NotificationType
from ..scheduling import (
    Conflict, ConflictDetector, RecurrenceExpander, SqlAlchemySlotRepository, InvalidSlotError,
    TimeSlot as DomainTimeSlot, TimeSlotCandidate, SlotStatus, conflicts_to_dict, validate_slot, weekday_index,
)
from ..scheduling.utils.slot_utils import overlapping_slots, slot_duration_hours
from ..schemas import TimeSlotCreate, TimeSlotUpdate

logger = logging.getLogger(__name__)

# Fields whose change requires a fresh conflict check
SCHEDULING_FIELDS = ("room_id", "professor_id", "date", "day", "start_time", "end_time")
# The only update fields an explicit null may clear
NULLABLE_FIELDS = ("description",)


def _check_day_matches_date(day: int, slot_date: Optional[date]):
    if slot_date is not None and day != weekday_index(slot_date):
        raise InvalidSlotError(
            f"day {day} does not match the weekday of {slot_date.isoformat()} ({weekday_index(slot_date)})",
            field="day",
        )


class ScheduleService:
    """Scheduling operations for one database session."""

    def __init__(self, db: Session, horizon_days: int = RECURRENCE_HORIZON_DAYS):
        self.db = db
        self.repository = SqlAlchemySlotRepository(db)
        self.detector = ConflictDetector(self.repository)
        self.expander = RecurrenceExpander(self.repository, horizon_days=horizon_days)

    # ================================
    # CONFLICT CHECKS
    # ================================

    def check_conflicts(self, candidate, exclude_id: Optional[int] = None) -> List[dict]:
        return conflicts_to_dict(self.detector.detect_conflicts(candidate, exclude_id=exclude_id))

    # ================================
    # CREATE / UPDATE / CANCEL
    # ================================

    def create_slot(self, data: TimeSlotCreate, user: User) -> dict:
        """
        Validate, conflict-check and persist a slot, plus its recurring series.

        A series is rejected as a whole when any occurrence conflicts, unless the
        request asks to skip conflicting occurrences; skipped ones are returned.
        """
        slot = DomainTimeSlot(
            room_id=data.room_id,
            professor_id=data.professor_id,
            course_id=data.course_id,
            class_id=data.class_id,
            date=data.date,
            day=data.day,
            start_time=data.start_time,
            end_time=data.end_time,
            type=data.type,
            recurrence=data.recurrence.to_domain() if data.recurrence else None,
        )
        validate_slot(slot)
        _check_day_matches_date(slot.day, slot.date)

        conflicts = self.detector.detect_conflicts(slot)
        if conflicts:
            logger.info(f"Rejected slot for room {slot.room_id} on day {slot.day}: {len(conflicts)} conflict(s)")
            raise SchedulingConflictError("Scheduling conflicts detected", conflicts=conflicts_to_dict(conflicts))

        occurrences, skipped = [], []
        if slot.recurrence is not None:
            report = self.expander.expand(slot)
            if report.has_conflicts and not data.skip_conflicting_occurrences:
                raise SchedulingConflictError(
                    "Recurring series conflicts with existing slots",
                    occurrences=[r.to_dict() for r in report.conflicting()],
                )
            occurrences = report.clean()
            skipped = report.conflicting()

        record = TimeSlot.from_domain(slot, description=data.description, created_by_id=user.id)
        self.db.add(record)
        self.db.flush()

        occurrence_records = [
            TimeSlot.from_domain(
                occurrence.reschedule(recurrence_parent_id=record.id),
                description=data.description,
                created_by_id=user.id,
            )
            for occurrence in occurrences
        ]
        self.db.add_all(occurrence_records)
        self.db.commit()
        self.db.refresh(record)

        logger.info(
            f"User {user.id} scheduled slot {record.id} with {len(occurrence_records)} occurrence(s), "
            f"{len(skipped)} skipped"
        )
        notify_participants.delay(record.id, NotificationType.NEW_SCHEDULE.value)

        return {
            "slot": record,
            "occurrences": occurrence_records,
            "skipped": [r.to_dict() for r in skipped],
        }

    def update_slot(self, slot_id: int, data: TimeSlotUpdate, user: User) -> TimeSlot:
        record = self.get_slot(slot_id)
        self._authorize(record, user, "modify")

        if record.status == SlotStatus.CANCELLED:
            raise ScheduleError("Cancelled slots cannot be modified", status_code=400)

        changes = data.model_dump(exclude_unset=True)
        if not changes:
            raise ScheduleError("No changes provided", status_code=400)

        cleared = sorted(f for f, value in changes.items() if value is None and f not in NULLABLE_FIELDS)
        if cleared:
            raise ScheduleError("Fields cannot be null", status_code=400, extras={"fields": cleared})

        if changes.get("status") == SlotStatus.CANCELLED:
            raise ScheduleError("Use the cancel endpoint to cancel a slot", status_code=400)

        # Moving a slot to another date moves it to that date's weekday unless a day is given
        if "date" in changes and "day" not in changes:
            changes["day"] = weekday_index(changes["date"])

        new_status = changes.get("status", record.status)
        reactivated = new_status == SlotStatus.SCHEDULED and record.status != SlotStatus.SCHEDULED
        if new_status == SlotStatus.SCHEDULED and (reactivated or any(f in changes for f in SCHEDULING_FIELDS)):
            candidate = record.to_domain().reschedule(**{f: changes[f] for f in SCHEDULING_FIELDS if f in changes})
            validate_slot(candidate)
            _check_day_matches_date(candidate.day, candidate.date)
            conflicts = self.detector.detect_conflicts(candidate, exclude_id=record.id)
            conflicts = self._without_series_siblings(conflicts, record, candidate)
            if conflicts:
                raise SchedulingConflictError("Scheduling conflicts detected", conflicts=conflicts_to_dict(conflicts))

        for field, value in changes.items():
            setattr(record, field, value)
        record.updated_by_id = user.id
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"User {user.id} updated slot {record.id}: {sorted(changes)}")
        notify_participants.delay(record.id, NotificationType.SCHEDULE_UPDATED.value)
        return record

    def cancel_slot(self, slot_id: int, reason: str, notify: bool, user: User) -> TimeSlot:
        record = self.get_slot(slot_id)
        self._authorize(record, user, "cancel")

        if record.status == SlotStatus.CANCELLED:
            raise ScheduleError("Slot is already cancelled", status_code=400)

        record.status = SlotStatus.CANCELLED
        record.cancellation_reason = reason
        record.cancelled_by_id = user.id
        record.cancelled_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(record)

        logger.info(f"User {user.id} cancelled slot {record.id}")
        if notify:
            notify_participants.delay(record.id, NotificationType.SCHEDULE_CANCELLED.value, reason)
        return record

    # ================================
    # QUERIES
    # ================================

    def get_slot(self, slot_id: int) -> TimeSlot:
        record = self.db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
        if not record:
            raise NotFoundError("Time slot")
        return record

    def list_slots(
        self,
        type=None,
        class_id: Optional[int] = None,
        professor_id: Optional[int] = None,
        room_id: Optional[int] = None,
        course_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status=None,
    ) -> List[TimeSlot]:
        query = self.db.query(TimeSlot)
        if type:
            query = query.filter(TimeSlot.type == type)
        if class_id:
            query = query.filter(TimeSlot.class_id == class_id)
        if professor_id:
            query = query.filter(TimeSlot.professor_id == professor_id)
        if room_id:
            query = query.filter(TimeSlot.room_id == room_id)
        if course_id:
            query = query.filter(TimeSlot.course_id == course_id)
        if status:
            query = query.filter(TimeSlot.status == status)
        if start_date:
            query = query.filter(TimeSlot.date >= start_date)
        if end_date:
            query = query.filter(TimeSlot.date <= end_date)
        return query.order_by(TimeSlot.date.asc(), TimeSlot.start_time.asc()).all()

    def class_schedule(self, class_id: int, **filters) -> List[TimeSlot]:
        return self.list_slots(class_id=class_id, **filters)

    def professor_schedule(self, professor_id: int, **filters) -> List[TimeSlot]:
        return self.list_slots(professor_id=professor_id, **filters)

    def available_rooms(
        self,
        on_date: Optional[date] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        capacity: Optional[int] = None,
        facilities: Optional[List[str]] = None,
    ) -> List[Room]:
        """Rooms matching capacity and facilities, minus those booked in the given window."""
        query = self.db.query(Room)
        if capacity:
            query = query.filter(Room.capacity >= capacity)
        rooms = query.order_by(Room.name.asc()).all()

        if facilities:
            wanted = {RoomFacility(f).value for f in facilities}
            rooms = [room for room in rooms if wanted.issubset(room.facilities or [])]

        if on_date and start_time and end_time:
            candidate = TimeSlotCandidate(day=weekday_index(on_date), start_time=start_time, end_time=end_time, date=on_date)
            validate_slot(candidate)
            booked = overlapping_slots(candidate, self.repository.find_scheduled_slots(day=candidate.day))
            occupied = {slot.room_id for slot in booked}
            rooms = [room for room in rooms if room.id not in occupied and room.status == RoomStatus.AVAILABLE]
        return rooms

    def room_stats(self, start_date: Optional[date] = None, end_date: Optional[date] = None, room_id: Optional[int] = None) -> List[dict]:
        query = self.db.query(TimeSlot, Room).join(Room, TimeSlot.room_id == Room.id)
        if room_id:
            query = query.filter(TimeSlot.room_id == room_id)
        if start_date:
            query = query.filter(TimeSlot.date >= start_date)
        if end_date:
            query = query.filter(TimeSlot.date <= end_date)

        stats = {}
        for slot, room in query.order_by(Room.name.asc()).all():
            entry = stats.setdefault(room.id, {
                "room_id": room.id,
                "room_name": room.name,
                "total_slots": 0,
                "total_hours": 0.0,
                "type_distribution": Counter(),
                "cancelled_slots": 0,
            })
            entry["total_slots"] += 1
            entry["total_hours"] += slot_duration_hours(slot)
            entry["type_distribution"][slot.type.value] += 1
            if slot.status == SlotStatus.CANCELLED:
                entry["cancelled_slots"] += 1

        for entry in stats.values():
            entry["type_distribution"] = dict(entry["type_distribution"])
            entry["total_hours"] = round(entry["total_hours"], 2)
        return list(stats.values())

    # ================================
    # HELPERS
    # ================================

    def _series_ids(self, record: TimeSlot) -> set:
        origin_id = record.recurrence_parent_id or (record.id if record.recurrence_type else None)
        if origin_id is None:
            return set()
        rows = self.db.query(TimeSlot.id).filter(
            or_(TimeSlot.id == origin_id, TimeSlot.recurrence_parent_id == origin_id)
        ).all()
        return {row.id for row in rows}

    def _without_series_siblings(self, conflicts: List[Conflict], record: TimeSlot, candidate) -> List[Conflict]:
        """Drop hits on other members of the same series unless they fall on the candidate's date."""
        series = self._series_ids(record)
        if not series:
            return conflicts

        kept = []
        for conflict in conflicts:
            slots = [s for s in conflict.slots if s.id not in series or s.date == candidate.date]
            if slots:
                kept.append(Conflict.of(conflict.type, slots))
        return kept

    @staticmethod
    def _authorize(record: TimeSlot, user: User, action: str):
        if user.role != UserRole.ADMIN and record.professor_id != user.id:
            raise PermissionDeniedError(f"Not authorized to {action} this slot")


def complete_elapsed_slots(db: Session, today: Optional[date] = None) -> int:
    """Mark scheduled slots dated before ``today`` as completed. Returns how many changed."""
    today = today or date.today()
    elapsed = db.query(TimeSlot).filter(
        TimeSlot.status == SlotStatus.SCHEDULED,
        TimeSlot.date < today,
    ).all()
    for slot in elapsed:
        slot.status = SlotStatus.COMPLETED
    if elapsed:
        db.commit()
        logger.info(f"Marked {len(elapsed)} elapsed slot(s) as completed")
    return len(elapsed)
