"""
Attendance service.
Recording, listing, updating and tallying attendance records.
"""
import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.entities import Attendance
from app.errors import ConflictError, NotFoundError
from app.models import ATTENDANCE_STATUSES, AttendanceIn, AttendanceUpdate
from app.services.meeting_service import get_meeting_or_404
from app.utils.common import paginate, utcnow

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Attendance already recorded for this participant in this meeting"


def _commit_unique(db) -> None:
    # (meeting, participant email) is unique; a racing duplicate loses here
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)


def record_attendance(db, user, data: AttendanceIn) -> Attendance:
    meeting = get_meeting_or_404(db, data.meeting)

    record = Attendance(
        meeting_id=meeting.id,
        participant_user_id=data.participant.user,
        participant_name=data.participant.name,
        participant_email=data.participant.email,
        status=data.status,
        check_in_time=data.check_in_time,
        check_out_time=data.check_out_time,
        notes=data.notes,
        recorded_by_id=user.id,
    )
    if data.status == "present":
        record.check_in_time = utcnow()
    db.add(record)
    _commit_unique(db)
    db.refresh(record)
    logger.info("[Attendance] %s marked %s for meeting %s", record.participant_email, record.status, meeting.id)
    return record


def list_attendance(db, page=None, limit=None, meeting_id: Optional[str] = None):
    stmt = select(Attendance)
    if meeting_id:
        stmt = stmt.where(Attendance.meeting_id == meeting_id)
    stmt = stmt.order_by(Attendance.created_at.desc())
    return paginate(db, stmt, page, limit)


def update_attendance(db, attendance_id: str, data: AttendanceUpdate) -> Attendance:
    record = db.get(Attendance, attendance_id)
    if record is None:
        raise NotFoundError("Attendance record")

    fields = data.model_fields_set
    if "participant" in fields and data.participant is not None:
        record.participant_user_id = data.participant.user
        record.participant_name = data.participant.name
        record.participant_email = data.participant.email
    if "status" in fields and data.status is not None:
        record.status = data.status
    for name in ("check_in_time", "check_out_time", "notes"):
        if name in fields:
            setattr(record, name, getattr(data, name))
    _commit_unique(db)
    db.refresh(record)
    return record


def attendance_stats(db, meeting_id: Optional[str] = None) -> dict:
    stmt = select(Attendance.status, func.count()).group_by(Attendance.status)
    total_stmt = select(func.count()).select_from(Attendance)
    if meeting_id:
        stmt = stmt.where(Attendance.meeting_id == meeting_id)
        total_stmt = total_stmt.where(Attendance.meeting_id == meeting_id)
    counts = dict(db.execute(stmt).all())
    return {
        "stats": [{"status": s, "count": counts[s]} for s in ATTENDANCE_STATUSES if s in counts],
        "byStatus": {s: counts.get(s, 0) for s in ATTENDANCE_STATUSES},
        "totalRecords": db.scalar(total_stmt),
    }
