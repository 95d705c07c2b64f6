"""
Meeting service.
CRUD over meetings with organizer/attendee access rules, filters, stats
and the derived attendee notifications.
"""
import logging
from datetime import date as date_type, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, or_, select

from app.entities import Meeting, MeetingAttendee
from app.errors import ForbiddenError, NotFoundError
from app.models import MEETING_STATUSES, MeetingIn
from app.services.notification_service import NotificationTemplate, fan_out
from app.utils.common import paginate, utcnow

logger = logging.getLogger(__name__)


def _visible_to(user):
    """Where-clause: caller is the organizer or a linked attendee."""
    return or_(
        Meeting.organizer_id == user.id,
        Meeting.attendees.any(MeetingAttendee.user_id == user.id),
    )


def _apply(meeting: Meeting, data: MeetingIn) -> None:
    meeting.title = data.title
    meeting.description = data.description
    meeting.date = data.date
    meeting.start_time = data.start_time
    meeting.end_time = data.end_time
    meeting.location = data.location
    meeting.status = data.status
    meeting.meeting_type = data.meeting_type
    meeting.priority = data.priority
    meeting.tags = list(data.tags)
    meeting.attachments = [a.model_dump(mode="json") for a in data.attachments]
    meeting.attendees = [
        MeetingAttendee(user_id=a.user, email=a.email, name=a.name, status=a.status)
        for a in data.attendees
    ]


def can_view(meeting: Meeting, user) -> bool:
    return meeting.organizer_id == user.id or any(a.user_id == user.id for a in meeting.attendees)


def get_meeting_or_404(db, meeting_id: str) -> Meeting:
    meeting = db.get(Meeting, meeting_id)
    if meeting is None:
        raise NotFoundError("Meeting")
    return meeting


def create_meeting(db, user, data: MeetingIn) -> Meeting:
    meeting = Meeting(organizer_id=user.id)
    _apply(meeting, data)
    db.add(meeting)
    db.flush()

    fan_out(db, meeting.attendees, NotificationTemplate(
        type="meeting-reminder",
        title="New Meeting Invitation",
        message=f'You have been invited to "{meeting.title}" on {meeting.date.strftime("%a %b %d %Y")}',
        related_meeting_id=meeting.id,
        scheduled_for=meeting.date - timedelta(hours=24),
    ))
    db.commit()
    db.refresh(meeting)
    logger.info("[Meeting] Created %s by %s", meeting.id, user.id)
    return meeting


def list_meetings(
    db,
    user,
    page=None,
    limit=None,
    status: Optional[str] = None,
    on_date: Optional[date_type] = None,
    search: Optional[str] = None,
):
    stmt = select(Meeting).where(_visible_to(user))
    if status:
        stmt = stmt.where(Meeting.status == status)
    if on_date:
        start = datetime.combine(on_date, time.min)
        stmt = stmt.where(Meeting.date >= start, Meeting.date < start + timedelta(days=1))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            Meeting.title.ilike(pattern),
            Meeting.description.ilike(pattern),
            Meeting.location.ilike(pattern),
        ))
    stmt = stmt.order_by(Meeting.date.asc())
    return paginate(db, stmt, page, limit)


def get_meeting(db, user, meeting_id: str) -> Meeting:
    meeting = get_meeting_or_404(db, meeting_id)
    if not can_view(meeting, user):
        raise ForbiddenError("Access denied")
    return meeting


def update_meeting(db, user, meeting_id: str, data: MeetingIn) -> Meeting:
    meeting = get_meeting_or_404(db, meeting_id)
    if meeting.organizer_id != user.id:
        raise ForbiddenError("Only organizer can update meeting")
    _apply(meeting, data)
    db.flush()

    fan_out(db, meeting.attendees, NotificationTemplate(
        type="meeting-update",
        title="Meeting Updated",
        message=f'Meeting "{meeting.title}" has been updated',
        related_meeting_id=meeting.id,
    ))
    db.commit()
    db.refresh(meeting)
    logger.info("[Meeting] Updated %s", meeting.id)
    return meeting


def delete_meeting(db, user, meeting_id: str) -> None:
    meeting = get_meeting_or_404(db, meeting_id)
    if meeting.organizer_id != user.id:
        raise ForbiddenError("Only organizer can delete meeting")

    # recipients come from the attendee list before it is removed
    fan_out(db, meeting.attendees, NotificationTemplate(
        type="meeting-cancelled",
        title="Meeting Cancelled",
        message=f'Meeting "{meeting.title}" has been cancelled',
        related_meeting_id=meeting.id,
    ))
    db.delete(meeting)
    db.commit()
    logger.info("[Meeting] Deleted %s", meeting_id)


def meeting_stats(db, user) -> dict:
    visible = _visible_to(user)
    rows = db.execute(
        select(Meeting.status, func.count()).where(visible).group_by(Meeting.status)
    ).all()
    counts = dict(rows)
    total = db.scalar(select(func.count()).select_from(Meeting).where(visible))
    upcoming = db.scalar(
        select(func.count()).select_from(Meeting).where(
            visible, Meeting.date >= utcnow(), Meeting.status == "scheduled"
        )
    )
    return {
        "stats": [{"status": s, "count": counts[s]} for s in MEETING_STATUSES if s in counts],
        "byStatus": {s: counts.get(s, 0) for s in MEETING_STATUSES},
        "totalMeetings": total,
        "upcomingMeetings": upcoming,
    }
