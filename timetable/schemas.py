from pydantic import BaseModel, Field
from datetime import datetime, date as _date
from typing import Optional, List
from .models import RoomStatus, NotificationType
from .scheduling.core.time_slot import SlotType, SlotStatus, RecurrenceCadence, Recurrence

TIME_REGEX = r"^([0-1][0-9]|2[0-3]):[0-5][0-9]$"

# ----------------- Time Slot Schemas ---------------------

class RecurrenceIn(BaseModel):
    type: RecurrenceCadence
    until: Optional[_date] = None

    def to_domain(self) -> Recurrence:
        return Recurrence(cadence=self.type, until=self.until)

class TimeSlotCreate(BaseModel):
    course_id: int
    professor_id: int
    class_id: int
    room_id: int
    type: SlotType = SlotType.COURSE
    start_time: str = Field(..., pattern=TIME_REGEX, description="Start time in HH:MM format")
    end_time: str = Field(..., pattern=TIME_REGEX, description="End time in HH:MM format")
    day: int = Field(..., ge=0, le=6, description="Day of week, 0 = Sunday")
    date: _date
    recurrence: Optional[RecurrenceIn] = None
    description: Optional[str] = Field(None, max_length=500)
    # Series policy: persist the clean occurrences instead of rejecting the whole series
    skip_conflicting_occurrences: bool = False

class TimeSlotUpdate(BaseModel):
    course_id: Optional[int] = None
    room_id: Optional[int] = None
    professor_id: Optional[int] = None
    start_time: Optional[str] = Field(None, pattern=TIME_REGEX)
    end_time: Optional[str] = Field(None, pattern=TIME_REGEX)
    day: Optional[int] = Field(None, ge=0, le=6)
    date: Optional[_date] = None
    type: Optional[SlotType] = None
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[SlotStatus] = None

class ConflictCheckRequest(BaseModel):
    start_time: str = Field(..., pattern=TIME_REGEX)
    end_time: str = Field(..., pattern=TIME_REGEX)
    day: int = Field(..., ge=0, le=6)
    date: Optional[_date] = None
    room_id: Optional[int] = None
    professor_id: Optional[int] = None
    class_id: Optional[int] = None
    exclude_slot_id: Optional[int] = None

class CancelRequest(BaseModel):
    reason: str = Field(..., max_length=500)
    notify: bool = True

class TimeSlotOut(BaseModel):
    id: int
    room_id: int
    professor_id: int
    course_id: int
    class_id: int
    date: _date
    day: int
    start_time: str
    end_time: str
    type: SlotType
    status: SlotStatus
    description: Optional[str] = None
    recurrence_type: Optional[RecurrenceCadence] = None
    recurrence_until: Optional[_date] = None
    recurrence_parent_id: Optional[int] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# ----------------- Room Schemas ---------------------

class RoomOut(BaseModel):
    id: int
    name: str
    capacity: int
    building: Optional[str] = None
    floor: Optional[int] = None
    facilities: List[str] = Field(default_factory=list)
    status: RoomStatus

    class Config:
        from_attributes = True

class RoomStats(BaseModel):
    room_id: int
    room_name: str
    total_slots: int
    total_hours: float
    type_distribution: dict
    cancelled_slots: int

# ----------------- Notification Schemas ---------------------

class NotificationOut(BaseModel):
    id: int
    type: NotificationType
    message: str
    slot_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True
