"""
Celery Configuration for the timetable backend with Beat Scheduling
"""

from celery import Celery
from celery.schedules import crontab

from .config import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

# Create Celery app
celery_app = Celery(
    "timetable",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
    include=["timetable.celery_tasks.notifications", "timetable.celery_tasks.maintenance"]
)

# Basic configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)

# Beat schedule configuration
celery_app.conf.beat_schedule = {
    'complete-elapsed-slots': {
        'task': 'timetable.celery_tasks.maintenance.complete_elapsed_slots',
        'schedule': crontab(hour=0, minute=5),
    },
}

if __name__ == "__main__":
    celery_app.start()
