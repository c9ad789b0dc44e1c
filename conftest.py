import os

# Keep the application's own engine off the filesystem while tests import it
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import date
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from timetable.auth import create_token_for_user
from timetable.database import Base, get_db
from timetable.models import User, UserRole, SchoolClass, Course, Room, RoomStatus, TimeSlot
from timetable.scheduling import SlotType, SlotStatus, weekday_index

MONDAY = date(2024, 1, 1)


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def notify(monkeypatch):
    """Stand-in for the Celery notification task so no broker is needed."""
    task = MagicMock()
    monkeypatch.setattr("timetable.services.schedule_service.notify_participants", task)
    return task


@pytest.fixture
def school(db):
    class_a = SchoolClass(name="1A")
    class_b = SchoolClass(name="1B")
    db.add_all([class_a, class_b])
    db.flush()

    admin = User(username="admin", email="admin@school.test", role=UserRole.ADMIN)
    prof = User(username="prof", email="prof@school.test", role=UserRole.PROFESSOR)
    other_prof = User(username="other", email="other@school.test", role=UserRole.PROFESSOR)
    student = User(username="student", email="student@school.test", role=UserRole.STUDENT, class_id=class_a.id)
    math = Course(title="Mathematics", code="MATH101")
    room_a = Room(name="A101", capacity=30, building="A", floor=1, facilities=["PROJECTOR", "WHITEBOARD"])
    room_b = Room(name="B201", capacity=60, building="B", floor=2, facilities=["COMPUTER"])
    room_c = Room(name="C301", capacity=80, building="C", floor=3, facilities=[], status=RoomStatus.MAINTENANCE)
    db.add_all([admin, prof, other_prof, student, math, room_a, room_b, room_c])
    db.commit()

    return SimpleNamespace(
        admin=admin, prof=prof, other_prof=other_prof, student=student,
        class_a=class_a, class_b=class_b, course=math,
        room_a=room_a, room_b=room_b, room_c=room_c,
    )


@pytest.fixture
def add_slot(db, school):
    """Insert a slot row directly, bypassing conflict checks."""
    def _add(start="09:00", end="10:00", on=MONDAY, room=None, professor=None, status=SlotStatus.SCHEDULED, **extra):
        slot = TimeSlot(
            room_id=(room or school.room_a).id,
            professor_id=(professor or school.prof).id,
            course_id=school.course.id,
            class_id=school.class_a.id,
            date=on,
            day=weekday_index(on),
            start_time=start,
            end_time=end,
            type=extra.pop("type", SlotType.COURSE),
            status=status,
            **extra,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot
    return _add


@pytest.fixture
def client(db):
    from timetable.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user):
    return {"Authorization": f"Bearer {create_token_for_user(user)}"}
