from sqlalchemy import String, Integer, Boolean, Enum, ForeignKey, DateTime, Date, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.sqlite import JSON as SQLiteJSON
from sqlalchemy.ext.mutable import MutableList
from datetime import datetime, date as _date
from typing import Optional
from .database import Base
from .scheduling.core.time_slot import (
    SlotType, SlotStatus, RecurrenceCadence, Recurrence, TimeSlot as DomainTimeSlot
)
import enum

# Enums

class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PROFESSOR = "professor"
    STUDENT = "student"

class RoomStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    MAINTENANCE = "MAINTENANCE"
    OUT_OF_SERVICE = "OUT_OF_SERVICE"

class RoomFacility(str, enum.Enum):
    PROJECTOR = "PROJECTOR"
    COMPUTER = "COMPUTER"
    WHITEBOARD = "WHITEBOARD"
    SMARTBOARD = "SMARTBOARD"
    AC = "AC"

class NotificationType(str, enum.Enum):
    NEW_SCHEDULE = "NEW_SCHEDULE"
    SCHEDULE_UPDATED = "SCHEDULE_UPDATED"
    SCHEDULE_CANCELLED = "SCHEDULE_CANCELLED"

# Models

class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String, unique=True, index=True)
    email: Mapped[str] = mapped_column(String, unique=True, index=True)
    first_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    last_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.STUDENT)

    # Students belong to a class; professors and admins don't
    class_id: Mapped[Optional[int]] = mapped_column(ForeignKey("classes.id"), nullable=True)

    school_class = relationship("SchoolClass", back_populates="students")
    notifications = relationship("Notification", back_populates="user")

class SchoolClass(Base):
    __tablename__ = "classes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, unique=True, index=True)

    students = relationship("User", back_populates="school_class")

class Course(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String)
    code: Mapped[str] = mapped_column(String, unique=True, index=True)

class Room(Base):
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String, unique=True, index=True)
    capacity: Mapped[int] = mapped_column(Integer)
    building: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    floor: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    facilities: Mapped[Optional[list[str]]] = mapped_column(MutableList.as_mutable(SQLiteJSON), default=list)
    status: Mapped[RoomStatus] = mapped_column(Enum(RoomStatus), default=RoomStatus.AVAILABLE)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    time_slots = relationship("TimeSlot", back_populates="room")

class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        Index("ix_time_slots_room_day", "room_id", "day"),
        Index("ix_time_slots_professor_day", "professor_id", "day"),
        Index("ix_time_slots_class_day", "class_id", "day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id"))
    professor_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"))
    class_id: Mapped[int] = mapped_column(ForeignKey("classes.id"))

    date: Mapped[_date] = mapped_column(Date)
    day: Mapped[int] = mapped_column(Integer)  # 0 = Sunday ... 6 = Saturday
    start_time: Mapped[str] = mapped_column(String(5))  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5))    # HH:MM

    type: Mapped[SlotType] = mapped_column(Enum(SlotType), default=SlotType.COURSE)
    status: Mapped[SlotStatus] = mapped_column(Enum(SlotStatus), default=SlotStatus.SCHEDULED, index=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Recurrence descriptor on the series origin; generated occurrences point back to it
    recurrence_type: Mapped[Optional[RecurrenceCadence]] = mapped_column(Enum(RecurrenceCadence), nullable=True)
    recurrence_until: Mapped[Optional[_date]] = mapped_column(Date, nullable=True)
    recurrence_parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("time_slots.id"), nullable=True)

    # Cancellation
    cancellation_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    cancelled_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    created_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    updated_by_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    room = relationship("Room", back_populates="time_slots")
    professor = relationship("User", foreign_keys=[professor_id])
    course = relationship("Course")
    school_class = relationship("SchoolClass")

    @property
    def recurrence(self) -> Optional[Recurrence]:
        if self.recurrence_type is None:
            return None
        return Recurrence(cadence=self.recurrence_type, until=self.recurrence_until)

    def to_domain(self) -> DomainTimeSlot:
        """Convert this row into the scheduling core's value type."""
        return DomainTimeSlot(
            id=self.id,
            room_id=self.room_id,
            professor_id=self.professor_id,
            course_id=self.course_id,
            class_id=self.class_id,
            date=self.date,
            day=self.day,
            start_time=self.start_time,
            end_time=self.end_time,
            type=self.type,
            status=self.status,
            recurrence=self.recurrence,
            recurrence_parent_id=self.recurrence_parent_id,
        )

    @classmethod
    def from_domain(cls, slot: DomainTimeSlot, **extra) -> "TimeSlot":
        recurrence = slot.recurrence
        return cls(
            room_id=slot.room_id,
            professor_id=slot.professor_id,
            course_id=slot.course_id,
            class_id=slot.class_id,
            date=slot.date,
            day=slot.day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            type=slot.type,
            status=slot.status,
            recurrence_type=recurrence.cadence if recurrence else None,
            recurrence_until=recurrence.until if recurrence else None,
            recurrence_parent_id=slot.recurrence_parent_id,
            **extra,
        )

class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    # One row per recipient; class_id is set when the user was reached through their class
    user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    class_id: Mapped[Optional[int]] = mapped_column(ForeignKey("classes.id"), nullable=True, index=True)
    slot_id: Mapped[Optional[int]] = mapped_column(ForeignKey("time_slots.id"), nullable=True)

    type: Mapped[NotificationType] = mapped_column(Enum(NotificationType))
    message: Mapped[str] = mapped_column(String)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="notifications")
