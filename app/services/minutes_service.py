"""
Minutes service.
One minutes document per meeting, with owned action items and decisions.
"""
import logging
from types import SimpleNamespace
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.entities import ActionItem, Decision, MeetingMinutes
from app.errors import ConflictError, NotFoundError
from app.models import ActionItemIn, ActionItemUpdate, DecisionIn, MinutesIn, MinutesUpdate
from app.services.meeting_service import get_meeting_or_404
from app.services.notification_service import NotificationTemplate, fan_out
from app.utils.common import paginate, utcnow

logger = logging.getLogger(__name__)


def _action_item(data: ActionItemIn, existing: Optional[ActionItem] = None) -> ActionItem:
    item = existing or ActionItem()
    if data.id and existing is None:
        item.id = data.id
    item.description = data.description
    item.assignee_user_id = data.assigned_to.user
    item.assignee_name = data.assigned_to.name
    item.assignee_email = data.assigned_to.email
    item.due_date = data.due_date
    item.status = data.status
    item.priority = data.priority
    return item


def _replace_action_items(minutes: MeetingMinutes, items: List[ActionItemIn]) -> None:
    """Replace the collection; items that carry a known id keep their row."""
    current = {i.id: i for i in minutes.action_items}
    minutes.action_items = [_action_item(data, current.get(data.id)) for data in items]


def _decisions(items: List[DecisionIn]) -> List[Decision]:
    return [Decision(description=d.description, impact=d.impact) for d in items]


def _check_action_item_ids(db, items: List[ActionItemIn]) -> None:
    ids = [i.id for i in items if i.id]
    taken = ids and db.scalar(select(func.count()).select_from(ActionItem).where(ActionItem.id.in_(ids)))
    if len(ids) != len(set(ids)) or taken:
        raise ConflictError("Action item ids must be unique")


def get_minutes_or_404(db, minutes_id: str) -> MeetingMinutes:
    minutes = db.get(MeetingMinutes, minutes_id)
    if minutes is None:
        raise NotFoundError("Meeting minutes")
    return minutes


def create_minutes(db, user, data: MinutesIn) -> MeetingMinutes:
    meeting = get_meeting_or_404(db, data.meeting)
    if db.scalar(select(MeetingMinutes.id).where(MeetingMinutes.meeting_id == meeting.id)):
        raise ConflictError("Minutes already exist for this meeting")
    _check_action_item_ids(db, data.action_items)

    minutes = MeetingMinutes(
        meeting_id=meeting.id,
        content=data.content,
        summary=data.summary,
        key_points=list(data.key_points),
        next_meeting_date=data.next_meeting_date,
        created_by_id=user.id,
    )
    minutes.action_items = [_action_item(i) for i in data.action_items]
    minutes.decisions = _decisions(data.decisions)
    db.add(minutes)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Minutes already exist for this meeting")

    fan_out(db, meeting.attendees, NotificationTemplate(
        type="minutes-available",
        title="Meeting Minutes Available",
        message=f'Minutes for "{meeting.title}" are now available',
        related_meeting_id=meeting.id,
    ))
    db.commit()
    db.refresh(minutes)
    logger.info("[Minutes] Created %s for meeting %s", minutes.id, meeting.id)
    return minutes


def list_minutes(db, page=None, limit=None, meeting_id: Optional[str] = None):
    stmt = select(MeetingMinutes)
    if meeting_id:
        stmt = stmt.where(MeetingMinutes.meeting_id == meeting_id)
    stmt = stmt.order_by(MeetingMinutes.created_at.desc())
    return paginate(db, stmt, page, limit)


def update_minutes(db, user, minutes_id: str, data: MinutesUpdate) -> MeetingMinutes:
    minutes = get_minutes_or_404(db, minutes_id)
    fields = data.model_fields_set

    for name in ("content", "summary", "next_meeting_date"):
        if name in fields and (name != "content" or data.content is not None):
            setattr(minutes, name, getattr(data, name))
    if "key_points" in fields and data.key_points is not None:
        minutes.key_points = list(data.key_points)
    if "action_items" in fields and data.action_items is not None:
        _replace_action_items(minutes, data.action_items)
    if "decisions" in fields and data.decisions is not None:
        minutes.decisions = _decisions(data.decisions)
    minutes.last_modified_by_id = user.id
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Action item ids must be unique")
    db.refresh(minutes)
    return minutes


def approve_minutes(db, user, minutes_id: str) -> MeetingMinutes:
    """Mark approved; approving again overwrites approver and time."""
    minutes = get_minutes_or_404(db, minutes_id)
    minutes.is_approved = True
    minutes.approved_by_id = user.id
    minutes.approved_at = utcnow()
    db.commit()
    db.refresh(minutes)
    logger.info("[Minutes] %s approved by %s", minutes.id, user.id)
    return minutes


def update_action_item(
    db, minutes_id: str, action_item_id: str, data: ActionItemUpdate
) -> Tuple[ActionItem, bool]:
    """
    Apply a partial update to one action item of a minutes document.

    Only the addressed row is written; sibling items are not touched.

    Returns:
        (action item, True when it was handed to a different assignee)
    """
    minutes = get_minutes_or_404(db, minutes_id)
    item = db.scalar(
        select(ActionItem).where(ActionItem.id == action_item_id, ActionItem.minutes_id == minutes.id)
    )
    if item is None:
        raise NotFoundError("Action item")

    reassigned = False
    if data.status:
        item.status = data.status
    if data.assigned_to:
        reassigned = data.assigned_to.email != item.assignee_email
        item.assignee_user_id = data.assigned_to.user
        item.assignee_name = data.assigned_to.name
        item.assignee_email = data.assigned_to.email
    if data.due_date:
        item.due_date = data.due_date
    if data.priority:
        item.priority = data.priority

    if reassigned:
        meeting = minutes.meeting
        fan_out(db, [SimpleNamespace(user_id=item.assignee_user_id)], NotificationTemplate(
            type="action-item",
            title="New Action Item",
            message=f'You have been assigned "{item.description}"'
                    + (f' from "{meeting.title}"' if meeting else ""),
            related_meeting_id=minutes.meeting_id,
            related_action_item_id=item.id,
            priority="high" if item.priority == "high" else "medium",
        ))
    db.commit()
    db.refresh(item)
    return item, reassigned
