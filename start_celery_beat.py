#!/usr/bin/env python3
"""
Start Celery Beat, which marks elapsed slots as completed every night
"""

import sys
from timetable.celery_app import celery_app

if __name__ == "__main__":
    print("Starting Celery Beat for the timetable...")
    print("Press Ctrl+C to stop")

    try:
        celery_app.start(['beat', '--loglevel=info'])
    except KeyboardInterrupt:
        print("\nStopping Celery Beat...")
        sys.exit(0)
