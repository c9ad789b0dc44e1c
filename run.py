#!/usr/bin/env python3
"""
Launcher for the Timetable API.
Run this from the root directory to start the application.
"""

import uvicorn

if __name__ == "__main__":
    print("Starting Timetable API with auto-reload...")
    print("API Documentation: http://localhost:8000/docs")
    print("Health Check: http://localhost:8000/health")
    print("Press Ctrl+C to stop the server")
    print("-" * 50)

    uvicorn.run(
        "timetable.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=["timetable"],
        log_level="info"
    )
