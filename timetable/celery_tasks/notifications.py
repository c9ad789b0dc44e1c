"""
In-app notifications for schedule changes.

Scheduling code never notifies on its own: the service dispatches
``notify_participants`` after a change has been committed.
"""

from sqlalchemy.orm import Session
from typing import Optional
import logging

from timetable.celery_app import celery_app
from timetable.database import SessionLocal
from timetable.models import User, TimeSlot, Notification, NotificationType

logger = logging.getLogger(__name__)

def build_message(slot: TimeSlot, notification_type: NotificationType, reason: Optional[str] = None) -> str:
    when = f"{slot.date.isoformat()} {slot.start_time}-{slot.end_time}"
    if notification_type == NotificationType.NEW_SCHEDULE:
        return f"New {slot.type.value.lower()} scheduled on {when}"
    if notification_type == NotificationType.SCHEDULE_UPDATED:
        return f"Schedule updated: {slot.type.value.lower()} now on {when}"
    message = f"Cancelled: {slot.type.value.lower()} on {when}"
    if reason:
        message += f" ({reason})"
    return message

def record_schedule_notifications(db: Session, slot_id: int, notification_type: NotificationType, reason: Optional[str] = None) -> int:
    """Store one notification for the slot's professor and one per student of its class. Returns the number stored."""
    slot = db.query(TimeSlot).filter(TimeSlot.id == slot_id).first()
    if not slot:
        logger.warning(f"Slot {slot_id} not found, no notification recorded")
        return 0

    message = build_message(slot, notification_type, reason)
    # Each recipient gets its own row and read flag
    students = db.query(User).filter(User.class_id == slot.class_id, User.is_active == True).order_by(User.id).all()
    notifications = [Notification(user_id=slot.professor_id, slot_id=slot.id, type=notification_type, message=message)]
    notifications += [
        Notification(user_id=student.id, class_id=slot.class_id, slot_id=slot.id, type=notification_type, message=message)
        for student in students
    ]
    db.add_all(notifications)
    db.commit()
    logger.info(f"Recorded {notification_type.value} notifications for slot {slot.id}")
    return len(notifications)

@celery_app.task(name="timetable.celery_tasks.notifications.notify_participants")
def notify_participants(slot_id: int, notification_type: str, reason: Optional[str] = None):
    db = SessionLocal()
    try:
        return record_schedule_notifications(db, slot_id, NotificationType(notification_type), reason)
    finally:
        db.close()
