from timetable.celery_app import celery_app
from timetable.database import SessionLocal
from timetable.services.schedule_service import complete_elapsed_slots as complete_elapsed
import logging

logger = logging.getLogger(__name__)

@celery_app.task(name="timetable.celery_tasks.maintenance.complete_elapsed_slots")
def complete_elapsed_slots():
    """Daily beat task: scheduled slots whose date has passed become COMPLETED"""
    db = SessionLocal()
    try:
        count = complete_elapsed(db)
        logger.info(f"Elapsed slot sweep finished, {count} slot(s) completed")
        return count
    finally:
        db.close()
