import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from timetable.config import LOG_LEVEL
from timetable.database import engine
from timetable.errors import ScheduleError
from timetable.models import Base
from timetable.routes import schedule, rooms, notifications
from timetable.scheduling import SchedulingError

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title="Timetable API",
    description="Classroom scheduling with room/professor conflict detection and recurring slots",
    version="1.0.0"
)

@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Malformed slot or recurrence input"""
    return JSONResponse(status_code=400, content={"detail": exc.message, "errors": [exc.to_dict()]})

@app.exception_handler(ScheduleError)
async def schedule_error_handler(request: Request, exc: ScheduleError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

# Include routers
app.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
app.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])

@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to the Timetable API",
        "version": "1.0.0",
        "endpoints": {
            "slots": "GET/POST /schedule/slots - List or create time slots",
            "check_conflicts": "POST /schedule/check-conflicts - Room and professor conflicts for a candidate slot",
            "update": "PUT /schedule/slots/{id} - Reschedule a slot",
            "cancel": "POST /schedule/slots/{id}/cancel - Cancel a slot",
            "rooms": "GET /rooms/ - Rooms free in a time window",
            "notifications": "GET /notifications/ - Schedule notifications for the current user"
        },
        "authentication": "Bearer token in Authorization header",
        "swagger_ui": "/docs - Interactive API documentation",
    }

@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# This allows running the app directly with: python -m timetable.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("timetable.main:app", host="0.0.0.0", port=8000, reload=True)
