"""
Notification service.
Fan-out of derived notifications and the recipient-facing CRUD.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import func, select, update

from app.entities import Notification, User
from app.errors import ForbiddenError, NotFoundError
from app.models import NotificationIn
from app.utils.common import paginate

logger = logging.getLogger(__name__)


@dataclass
class NotificationTemplate:
    """Everything but the recipient of a derived notification."""
    type: str
    title: str
    message: str
    related_meeting_id: Optional[str] = None
    related_action_item_id: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    priority: str = "medium"


def fan_out(db, attendees: Iterable, template: NotificationTemplate) -> List[Notification]:
    """
    One notification per attendee whose linked user resolves to an account.

    Attendees known only by e-mail (or linked to an id that no longer
    exists) are skipped. Adds to the session; the caller commits.

    Args:
        db: SQLAlchemy session
        attendees: objects with a ``user_id`` attribute (attendee or action item rows)
        template: notification content

    Returns:
        the notifications added to the session
    """
    attendees = list(attendees)
    user_ids = {a.user_id for a in attendees if a.user_id}
    known = set(db.scalars(select(User.id).where(User.id.in_(user_ids)))) if user_ids else set()

    created = []
    for a in attendees:
        if a.user_id not in known:
            continue
        n = Notification(
            recipient_id=a.user_id,
            type=template.type,
            title=template.title[:100],
            message=template.message[:300],
            priority=template.priority,
            related_meeting_id=template.related_meeting_id,
            related_action_item_id=template.related_action_item_id,
            scheduled_for=template.scheduled_for,
        )
        db.add(n)
        created.append(n)
    logger.info(
        "[Notify] %s: %d of %d attendees notified", template.type, len(created), len(attendees)
    )
    return created


# =========================
# Recipient-facing operations
# =========================
def list_notifications(db, user, page=None, limit=None, is_read: Optional[bool] = None):
    stmt = select(Notification).where(Notification.recipient_id == user.id)
    if is_read is not None:
        stmt = stmt.where(Notification.is_read == is_read)
    stmt = stmt.order_by(Notification.created_at.desc())
    items, pagination = paginate(db, stmt, page, limit)
    unread = db.scalar(
        select(func.count()).select_from(Notification).where(
            Notification.recipient_id == user.id, Notification.is_read.is_(False)
        )
    )
    return items, pagination, unread


def create_notification(db, user, data: NotificationIn) -> Notification:
    recipient_id = data.recipient or user.id
    if recipient_id != user.id and user.role != "admin":
        raise ForbiddenError("Only admins can notify other users")
    if db.get(User, recipient_id) is None:
        raise NotFoundError("Recipient")
    n = Notification(
        recipient_id=recipient_id,
        type=data.type,
        title=data.title,
        message=data.message,
        priority=data.priority,
        related_meeting_id=data.related_meeting,
        related_action_item_id=data.related_action_item,
        scheduled_for=data.scheduled_for,
        expires_at=data.expires_at,
    )
    db.add(n)
    db.commit()
    return n


def _own(db, user, notification_id: str) -> Notification:
    n = db.get(Notification, notification_id)
    # another user's notification is reported as missing
    if n is None or n.recipient_id != user.id:
        raise NotFoundError("Notification")
    return n


def mark_as_read(db, user, notification_id: str) -> Notification:
    n = _own(db, user, notification_id)
    n.is_read = True
    db.commit()
    return n


def mark_all_as_read(db, user) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.recipient_id == user.id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    db.commit()
    return result.rowcount


def delete_notification(db, user, notification_id: str) -> None:
    n = _own(db, user, notification_id)
    db.delete(n)
    db.commit()
