"""
Schedule API endpoints: time slots and conflict checks
"""

from typing import Optional
from datetime import date as _date
from fastapi import APIRouter, Depends, Query, Body, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User
from ..schemas import TimeSlotCreate, TimeSlotUpdate, TimeSlotOut, ConflictCheckRequest, CancelRequest
from ..auth import get_current_user, require_staff
from ..scheduling import TimeSlotCandidate, SlotType
from ..services.schedule_service import ScheduleService

router = APIRouter()


def slot_filters(
    type: Optional[SlotType] = Query(None),
    room_id: Optional[int] = Query(None),
    course_id: Optional[int] = Query(None),
    start_date: Optional[_date] = Query(None),
    end_date: Optional[_date] = Query(None),
) -> dict:
    return {
        "type": type,
        "room_id": room_id,
        "course_id": course_id,
        "start_date": start_date,
        "end_date": end_date,
    }


@router.get("/slots")
def list_slots(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    filters: dict = Depends(slot_filters),
    class_id: Optional[int] = Query(None),
    professor_id: Optional[int] = Query(None),
):
    slots = ScheduleService(db).list_slots(class_id=class_id, professor_id=professor_id, **filters)
    return {"results": len(slots), "slots": [TimeSlotOut.model_validate(s) for s in slots]}


@router.post("/slots", status_code=status.HTTP_201_CREATED)
def create_slot(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    slot_in: TimeSlotCreate = Body(...),
):
    """Create a slot; recurring slots also create their occurrences"""
    result = ScheduleService(db).create_slot(slot_in, current_user)
    return {
        "slot": TimeSlotOut.model_validate(result["slot"]),
        "occurrences": [TimeSlotOut.model_validate(o) for o in result["occurrences"]],
        "skipped": result["skipped"],
    }


@router.post("/check-conflicts")
def check_conflicts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    check_in: ConflictCheckRequest = Body(...),
):
    candidate = TimeSlotCandidate(
        day=check_in.day,
        start_time=check_in.start_time,
        end_time=check_in.end_time,
        room_id=check_in.room_id,
        professor_id=check_in.professor_id,
        date=check_in.date,
    )
    conflicts = ScheduleService(db).check_conflicts(candidate, exclude_id=check_in.exclude_slot_id)
    return {"conflicts": conflicts}


@router.get("/slots/class/{class_id}")
def get_class_schedule(
    class_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    filters: dict = Depends(slot_filters),
):
    slots = ScheduleService(db).class_schedule(class_id, **filters)
    return {"results": len(slots), "slots": [TimeSlotOut.model_validate(s) for s in slots]}


@router.get("/slots/professor/{professor_id}")
def get_professor_schedule(
    professor_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    filters: dict = Depends(slot_filters),
):
    slots = ScheduleService(db).professor_schedule(professor_id, **filters)
    return {"results": len(slots), "slots": [TimeSlotOut.model_validate(s) for s in slots]}


@router.put("/slots/{slot_id}", response_model=TimeSlotOut)
def update_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    slot_in: TimeSlotUpdate = Body(...),
):
    return ScheduleService(db).update_slot(slot_id, slot_in, current_user)


@router.post("/slots/{slot_id}/cancel", response_model=TimeSlotOut)
def cancel_slot(
    slot_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    cancel_in: CancelRequest = Body(...),
):
    return ScheduleService(db).cancel_slot(slot_id, cancel_in.reason, cancel_in.notify, current_user)
