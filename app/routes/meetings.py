"""
Meeting endpoints.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.config import MAIL_ENABLED
from app.db import get_db
from app.dependencies import get_current_user
from app.models import MeetingIn, MeetingOut, MeetingStatus
from app.routes.envelope import envelope, page_of
from app.services import mail_service, meeting_service

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.post("", status_code=201)
def create_meeting(
    body: MeetingIn,
    background: BackgroundTasks,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    meeting = MeetingOut.from_entity(meeting_service.create_meeting(db, user, body))
    if MAIL_ENABLED:
        background.add_task(mail_service.send_meeting_invitations, meeting)
    return envelope(meeting, "Meeting created successfully")


@router.get("")
def list_meetings(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    status: Optional[MeetingStatus] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    search: Optional[str] = None,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    items, pagination = meeting_service.list_meetings(
        db, user, page, limit, status=status, on_date=on_date, search=search
    )
    return envelope(page_of("meetings", [MeetingOut.from_entity(m) for m in items], pagination))


@router.get("/stats")
def meeting_stats(user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(meeting_service.meeting_stats(db, user))


@router.get("/{meeting_id}")
def get_meeting(meeting_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(MeetingOut.from_entity(meeting_service.get_meeting(db, user, meeting_id)))


@router.put("/{meeting_id}")
def update_meeting(meeting_id: str, body: MeetingIn, user=Depends(get_current_user), db=Depends(get_db)):
    meeting = meeting_service.update_meeting(db, user, meeting_id, body)
    return envelope(MeetingOut.from_entity(meeting), "Meeting updated successfully")


@router.delete("/{meeting_id}")
def delete_meeting(meeting_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    meeting_service.delete_meeting(db, user, meeting_id)
    return envelope(message="Meeting deleted successfully")
