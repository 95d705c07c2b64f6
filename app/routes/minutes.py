"""
Meeting minutes endpoints, including the single action item update.
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from app.config import MAIL_ENABLED
from app.db import get_db
from app.dependencies import get_current_user
from app.models import ActionItemOut, ActionItemUpdate, MinutesIn, MinutesOut, MinutesUpdate
from app.routes.envelope import envelope, page_of
from app.services import mail_service, minutes_service

router = APIRouter(prefix="/minutes", tags=["minutes"])


@router.post("", status_code=201)
def create_minutes(body: MinutesIn, user=Depends(get_current_user), db=Depends(get_db)):
    minutes = minutes_service.create_minutes(db, user, body)
    return envelope(MinutesOut.from_entity(minutes), "Meeting minutes created successfully")


@router.get("")
def list_minutes(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    meeting_id: Optional[str] = Query(None, alias="meetingId"),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    items, pagination = minutes_service.list_minutes(db, page, limit, meeting_id=meeting_id)
    return envelope(page_of("minutes", [MinutesOut.from_entity(m) for m in items], pagination))


@router.get("/{minutes_id}")
def get_minutes(minutes_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    return envelope(MinutesOut.from_entity(minutes_service.get_minutes_or_404(db, minutes_id)))


@router.put("/{minutes_id}")
def update_minutes(minutes_id: str, body: MinutesUpdate, user=Depends(get_current_user), db=Depends(get_db)):
    minutes = minutes_service.update_minutes(db, user, minutes_id, body)
    return envelope(MinutesOut.from_entity(minutes), "Meeting minutes updated successfully")


@router.put("/{minutes_id}/approve")
def approve_minutes(minutes_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    minutes = minutes_service.approve_minutes(db, user, minutes_id)
    return envelope(MinutesOut.from_entity(minutes), "Meeting minutes approved successfully")


@router.put("/{minutes_id}/action-items/{action_item_id}")
def update_action_item(
    minutes_id: str,
    action_item_id: str,
    body: ActionItemUpdate,
    background: BackgroundTasks,
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    item, reassigned = minutes_service.update_action_item(db, minutes_id, action_item_id, body)
    out = ActionItemOut.from_entity(item)
    if reassigned and MAIL_ENABLED:
        background.add_task(mail_service.send_action_item_reminder, out)
    return envelope(out, "Action item updated successfully")
