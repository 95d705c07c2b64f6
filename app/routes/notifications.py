"""
Notification endpoints (the caller's own notifications).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.db import get_db
from app.dependencies import get_current_user
from app.models import NotificationIn, NotificationOut
from app.routes.envelope import envelope, page_of
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    user=Depends(get_current_user),
    db=Depends(get_db),
):
    items, pagination, unread = notification_service.list_notifications(db, user, page, limit, is_read)
    return envelope(page_of(
        "notifications", [NotificationOut.from_entity(n) for n in items], pagination, unreadCount=unread
    ))


@router.post("", status_code=201)
def create_notification(body: NotificationIn, user=Depends(get_current_user), db=Depends(get_db)):
    n = notification_service.create_notification(db, user, body)
    return envelope(NotificationOut.from_entity(n), "Notification created successfully")


@router.put("/read-all")
def mark_all_as_read(user=Depends(get_current_user), db=Depends(get_db)):
    count = notification_service.mark_all_as_read(db, user)
    return envelope({"updated": count}, "All notifications marked as read")


@router.put("/{notification_id}/read")
def mark_as_read(notification_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    n = notification_service.mark_as_read(db, user, notification_id)
    return envelope(NotificationOut.from_entity(n), "Notification marked as read")


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, user=Depends(get_current_user), db=Depends(get_db)):
    notification_service.delete_notification(db, user, notification_id)
    return envelope(message="Notification deleted successfully")
