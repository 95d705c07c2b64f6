"""
Attendance endpoints.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.db import get_db
from app.dependencies import get_current_user
from app.models import AttendanceIn, AttendanceOut, AttendanceUpdate
from app.routes.envelope import envelope, page_of
from app.services import attendance_service

router = APIRouter(prefix="/attendance", tags=["attendance"], dependencies=[Depends(get_current_user)])


@router.post("", status_code=201)
def record_attendance(body: AttendanceIn, user=Depends(get_current_user), db=Depends(get_db)):
    record = attendance_service.record_attendance(db, user, body)
    return envelope(AttendanceOut.from_entity(record), "Attendance recorded successfully")


@router.get("")
def list_attendance(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    meeting_id: Optional[str] = Query(None, alias="meetingId"),
    db=Depends(get_db),
):
    items, pagination = attendance_service.list_attendance(db, page, limit, meeting_id=meeting_id)
    return envelope(page_of("attendance", [AttendanceOut.from_entity(a) for a in items], pagination))


@router.get("/stats")
def attendance_stats(meeting_id: Optional[str] = Query(None, alias="meetingId"), db=Depends(get_db)):
    return envelope(attendance_service.attendance_stats(db, meeting_id))


@router.put("/{attendance_id}")
def update_attendance(attendance_id: str, body: AttendanceUpdate, db=Depends(get_db)):
    record = attendance_service.update_attendance(db, attendance_id, body)
    return envelope(AttendanceOut.from_entity(record), "Attendance updated successfully")
