from typing import List, Optional
from datetime import date as _date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import User, RoomFacility
from ..schemas import RoomOut, RoomStats, TIME_REGEX
from ..auth import get_current_user, require_admin
from ..services.schedule_service import ScheduleService

router = APIRouter(tags=["rooms"])

@router.get("/", response_model=List[RoomOut])
def get_rooms(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    date: Optional[_date] = Query(None, description="Only rooms free on this date's weekday"),
    start_time: Optional[str] = Query(None, pattern=TIME_REGEX),
    end_time: Optional[str] = Query(None, pattern=TIME_REGEX),
    capacity: Optional[int] = Query(None, ge=1),
    features: Optional[List[RoomFacility]] = Query(None),
):
    """Rooms matching capacity and facilities, free in the given window if one is given"""
    return ScheduleService(db).available_rooms(date, start_time, end_time, capacity, features)

@router.get("/stats", response_model=List[RoomStats])
def get_room_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
    start_date: Optional[_date] = Query(None),
    end_date: Optional[_date] = Query(None),
    room_id: Optional[int] = Query(None),
):
    """Usage statistics per room (admin only)"""
    return ScheduleService(db).room_stats(start_date, end_date, room_id)
