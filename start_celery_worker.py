#!/usr/bin/env python3
"""
Start the Celery worker that records schedule notifications
"""

import sys
from timetable.celery_app import celery_app

if __name__ == "__main__":
    print("Starting Celery Worker for the timetable...")
    print("Processes schedule notifications and the nightly slot sweep")
    print("Press Ctrl+C to stop")

    try:
        celery_app.start(['worker', '--loglevel=info'])
    except KeyboardInterrupt:
        print("\nStopping Celery Worker...")
        sys.exit(0)
