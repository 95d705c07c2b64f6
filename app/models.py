"""
Data models (pydantic).

Request models carry the per-field validation rules and run before a
handler is reached; response models are built from entities and are also
what the client parses back. Field names are camelCase on the wire.
"""
import re
from datetime import datetime, timezone
from typing import Annotated, List, Literal, Optional, get_args

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from app.utils.common import to_naive_utc, utcnow

EMAIL_RE = re.compile(r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$")
TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")
ID_RE = re.compile(r"^[0-9a-f]{32}$")

Role = Literal["admin", "user"]
AttendeeStatus = Literal["invited", "accepted", "declined", "tentative"]
MeetingStatus = Literal["scheduled", "ongoing", "completed", "cancelled"]
MeetingType = Literal["in-person", "virtual", "hybrid"]
Priority = Literal["low", "medium", "high", "urgent"]
AttendanceStatus = Literal["present", "absent", "late", "excused"]
ActionItemStatus = Literal["pending", "in-progress", "completed", "cancelled"]
Level = Literal["low", "medium", "high"]
NotificationType = Literal[
    "meeting-reminder", "meeting-update", "meeting-cancelled",
    "action-item", "minutes-available", "general",
]

def _iso_utc(value: datetime) -> str:
    return value.replace(tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")


# Held as naive UTC, sent as ISO 8601 with a trailing Z
UtcDateTime = Annotated[
    datetime,
    AfterValidator(to_naive_utc),
    PlainSerializer(_iso_utc, return_type=str, when_used="json"),
]

MEETING_STATUSES = get_args(MeetingStatus)
ATTENDANCE_STATUSES = get_args(AttendanceStatus)


class Schema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# =========================
# Validation helpers
# =========================
def _email(value: str, message: str) -> str:
    value = (value or "").strip().lower()
    if not EMAIL_RE.match(value):
        raise ValueError(message)
    return value


def _text(value: Optional[str], message: str, min_len: int = 1, max_len: Optional[int] = None) -> str:
    value = (value or "").strip()
    if len(value) < min_len or (max_len is not None and len(value) > max_len):
        raise ValueError(message)
    return value


def _object_id(value: Optional[str], message: str = "Valid ID is required") -> Optional[str]:
    if value in (None, ""):
        return None
    if not ID_RE.match(value):
        raise ValueError(message)
    return value


def _password(value: str) -> str:
    if len(value or "") < 6:
        raise ValueError("Password must be at least 6 characters long")
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValueError(
            "Password must contain at least one lowercase letter, one uppercase letter, and one number"
        )
    return value


# =========================
# Auth
# =========================
class RegisterIn(Schema):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return _text(v, "Name must be between 2 and 50 characters", 2, 50)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _email(v, "Please provide a valid email")

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        return _password(v)


class LoginIn(Schema):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _email(v, "Please provide a valid email")

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if not v:
            raise ValueError("Password is required")
        return v


class ProfileUpdate(Schema):
    name: Optional[str] = None
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return None if v is None else _text(v, "Name must be between 2 and 50 characters", 2, 50)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return None if v is None else _email(v, "Please provide a valid email")


class ChangePasswordIn(Schema):
    current_password: str
    new_password: str

    @field_validator("current_password")
    @classmethod
    def check_current(cls, v):
        if not v:
            raise ValueError("Current password is required")
        return v

    @field_validator("new_password")
    @classmethod
    def check_new(cls, v):
        return _password(v)


class UserRef(Schema):
    id: str
    name: str
    email: str


class UserOut(UserRef):
    role: Role
    created_at: UtcDateTime


# =========================
# Meetings
# =========================
class Person(Schema):
    """Name/e-mail snapshot, optionally linked to a registered user."""
    user: Optional[str] = None
    name: str
    email: str


class PersonIn(Person):
    @field_validator("user")
    @classmethod
    def check_user(cls, v):
        return _object_id(v, "Valid user ID is required")

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return _text(v, "Name is required", 1, 100)

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return _email(v, "Valid email is required")


class AttendeeIn(PersonIn):
    status: AttendeeStatus = "invited"


class AttendeeOut(Person):
    id: str
    status: AttendeeStatus

    @classmethod
    def from_entity(cls, a):
        return cls(id=a.id, user=a.user_id, name=a.name, email=a.email, status=a.status)


class Attachment(Schema):
    filename: str
    original_name: Optional[str] = None
    path: Optional[str] = None
    size: Optional[int] = None
    uploaded_at: UtcDateTime = Field(default_factory=utcnow)


class MeetingIn(Schema):
    title: str
    description: str
    date: datetime
    start_time: str
    end_time: str
    location: str
    attendees: List[AttendeeIn]
    status: MeetingStatus = "scheduled"
    meeting_type: MeetingType = "in-person"
    priority: Priority = "medium"
    tags: List[str] = []
    attachments: List[Attachment] = []

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return _text(v, "Title must be between 3 and 100 characters", 3, 100)

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return _text(v, "Description must be between 10 and 500 characters", 10, 500)

    @field_validator("date")
    @classmethod
    def check_date(cls, v):
        return to_naive_utc(v)

    @field_validator("start_time")
    @classmethod
    def check_start(cls, v):
        if not TIME_RE.match(v or ""):
            raise ValueError("Please provide valid start time (HH:MM)")
        return v

    @field_validator("end_time")
    @classmethod
    def check_end(cls, v):
        if not TIME_RE.match(v or ""):
            raise ValueError("Please provide valid end time (HH:MM)")
        return v

    @field_validator("location")
    @classmethod
    def check_location(cls, v):
        return _text(v, "Location is required", 1, 255)

    @field_validator("attendees")
    @classmethod
    def check_attendees(cls, v):
        if not v:
            raise ValueError("At least one attendee is required")
        return v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v):
        return [t.strip() for t in v if t and t.strip()]


class MeetingRef(Schema):
    id: str
    title: str
    date: UtcDateTime
    location: Optional[str] = None

    @classmethod
    def from_entity(cls, m):
        if m is None:
            return None
        return cls(id=m.id, title=m.title, date=m.date, location=m.location)


class MeetingOut(Schema):
    id: str
    title: str
    description: str
    date: UtcDateTime
    start_time: str
    end_time: str
    location: str
    organizer: Optional[UserRef] = None
    attendees: List[AttendeeOut] = []
    status: MeetingStatus
    meeting_type: MeetingType
    priority: Priority
    tags: List[str] = []
    attachments: List[Attachment] = []
    created_at: Optional[UtcDateTime] = None
    updated_at: Optional[UtcDateTime] = None

    @classmethod
    def from_entity(cls, m):
        return cls(
            id=m.id,
            title=m.title,
            description=m.description,
            date=m.date,
            start_time=m.start_time,
            end_time=m.end_time,
            location=m.location,
            organizer=UserRef.model_validate(m.organizer) if m.organizer else None,
            attendees=[AttendeeOut.from_entity(a) for a in m.attendees],
            status=m.status,
            meeting_type=m.meeting_type,
            priority=m.priority,
            tags=list(m.tags or []),
            attachments=[Attachment.model_validate(a) for a in (m.attachments or [])],
            created_at=m.created_at,
            updated_at=m.updated_at,
        )


# =========================
# Attendance
# =========================
class AttendanceIn(Schema):
    meeting: str
    participant: PersonIn
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("meeting")
    @classmethod
    def check_meeting(cls, v):
        if not v:
            raise ValueError("Valid meeting ID is required")
        return _object_id(v, "Valid meeting ID is required")

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def check_times(cls, v):
        return to_naive_utc(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        if v is not None and len(v) > 200:
            raise ValueError("Notes cannot exceed 200 characters")
        return v


class AttendanceUpdate(Schema):
    participant: Optional[PersonIn] = None
    status: Optional[AttendanceStatus] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("check_in_time", "check_out_time")
    @classmethod
    def check_times(cls, v):
        return to_naive_utc(v)

    @field_validator("notes")
    @classmethod
    def check_notes(cls, v):
        if v is not None and len(v) > 200:
            raise ValueError("Notes cannot exceed 200 characters")
        return v


class AttendanceOut(Schema):
    id: str
    meeting_id: str
    meeting: Optional[MeetingRef] = None
    participant: Person
    status: AttendanceStatus
    check_in_time: Optional[UtcDateTime] = None
    check_out_time: Optional[UtcDateTime] = None
    notes: Optional[str] = None
    recorded_by: Optional[UserRef] = None
    created_at: Optional[UtcDateTime] = None
    updated_at: Optional[UtcDateTime] = None

    @classmethod
    def from_entity(cls, a):
        return cls(
            id=a.id,
            meeting_id=a.meeting_id,
            meeting=MeetingRef.from_entity(a.meeting),
            participant=Person(user=a.participant_user_id, name=a.participant_name, email=a.participant_email),
            status=a.status,
            check_in_time=a.check_in_time,
            check_out_time=a.check_out_time,
            notes=a.notes,
            recorded_by=UserRef.model_validate(a.recorded_by) if a.recorded_by else None,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )


# =========================
# Minutes
# =========================
class ActionItemIn(Schema):
    id: Optional[str] = None
    description: str
    assigned_to: PersonIn
    due_date: datetime
    status: ActionItemStatus = "pending"
    priority: Level = "medium"

    @field_validator("id")
    @classmethod
    def check_id(cls, v):
        return _object_id(v, "Valid action item ID is required")

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return _text(v, "Action item description is required (max 300 characters)", 1, 300)

    @field_validator("due_date")
    @classmethod
    def check_due(cls, v):
        return to_naive_utc(v)


class ActionItemUpdate(Schema):
    status: Optional[ActionItemStatus] = None
    assigned_to: Optional[PersonIn] = None
    due_date: Optional[datetime] = None
    priority: Optional[Level] = None

    @field_validator("due_date")
    @classmethod
    def check_due(cls, v):
        return to_naive_utc(v)


class ActionItemOut(Schema):
    id: str
    description: str
    assigned_to: Person
    due_date: UtcDateTime
    status: ActionItemStatus
    priority: Level
    created_at: Optional[UtcDateTime] = None
    updated_at: Optional[UtcDateTime] = None

    @classmethod
    def from_entity(cls, item):
        return cls(
            id=item.id,
            description=item.description,
            assigned_to=Person(user=item.assignee_user_id, name=item.assignee_name, email=item.assignee_email),
            due_date=item.due_date,
            status=item.status,
            priority=item.priority,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )


class DecisionIn(Schema):
    description: str
    impact: Level = "medium"

    @field_validator("description")
    @classmethod
    def check_description(cls, v):
        return _text(v, "Decision description cannot exceed 300 characters", 1, 300)


class DecisionOut(DecisionIn):
    id: str


def _key_points(v):
    if v is None:
        return v
    for point in v:
        if len(point) > 200:
            raise ValueError("Key point cannot exceed 200 characters")
    return v


class MinutesIn(Schema):
    meeting: str
    content: str
    summary: Optional[str] = None
    action_items: List[ActionItemIn] = []
    decisions: List[DecisionIn] = []
    key_points: List[str] = []
    next_meeting_date: Optional[datetime] = None

    @field_validator("meeting")
    @classmethod
    def check_meeting(cls, v):
        if not v:
            raise ValueError("Valid meeting ID is required")
        return _object_id(v, "Valid meeting ID is required")

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        return _text(v, "Meeting content must be at least 10 characters", 10)

    @field_validator("summary")
    @classmethod
    def check_summary(cls, v):
        if v is not None and len(v) > 500:
            raise ValueError("Summary cannot exceed 500 characters")
        return v

    @field_validator("key_points")
    @classmethod
    def check_key_points(cls, v):
        return _key_points(v)

    @field_validator("next_meeting_date")
    @classmethod
    def check_next(cls, v):
        return to_naive_utc(v)


class MinutesUpdate(Schema):
    content: Optional[str] = None
    summary: Optional[str] = None
    action_items: Optional[List[ActionItemIn]] = None
    decisions: Optional[List[DecisionIn]] = None
    key_points: Optional[List[str]] = None
    next_meeting_date: Optional[datetime] = None

    @field_validator("content")
    @classmethod
    def check_content(cls, v):
        return None if v is None else _text(v, "Meeting content must be at least 10 characters", 10)

    @field_validator("summary")
    @classmethod
    def check_summary(cls, v):
        if v is not None and len(v) > 500:
            raise ValueError("Summary cannot exceed 500 characters")
        return v

    @field_validator("key_points")
    @classmethod
    def check_key_points(cls, v):
        return _key_points(v)

    @field_validator("next_meeting_date")
    @classmethod
    def check_next(cls, v):
        return to_naive_utc(v)


class MinutesOut(Schema):
    id: str
    meeting_id: str
    meeting: Optional[MeetingRef] = None
    content: str
    summary: Optional[str] = None
    action_items: List[ActionItemOut] = []
    decisions: List[DecisionOut] = []
    key_points: List[str] = []
    next_meeting_date: Optional[UtcDateTime] = None
    created_by: Optional[UserRef] = None
    last_modified_by: Optional[UserRef] = None
    is_approved: bool = False
    approved_by: Optional[UserRef] = None
    approved_at: Optional[UtcDateTime] = None
    created_at: Optional[UtcDateTime] = None
    updated_at: Optional[UtcDateTime] = None

    @classmethod
    def from_entity(cls, m):
        def ref(user):
            return UserRef.model_validate(user) if user else None

        return cls(
            id=m.id,
            meeting_id=m.meeting_id,
            meeting=MeetingRef.from_entity(m.meeting),
            content=m.content,
            summary=m.summary,
            action_items=[ActionItemOut.from_entity(i) for i in m.action_items],
            decisions=[DecisionOut(id=d.id, description=d.description, impact=d.impact) for d in m.decisions],
            key_points=list(m.key_points or []),
            next_meeting_date=m.next_meeting_date,
            created_by=ref(m.created_by),
            last_modified_by=ref(m.last_modified_by),
            is_approved=m.is_approved,
            approved_by=ref(m.approved_by),
            approved_at=m.approved_at,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )


# =========================
# Notifications
# =========================
class NotificationIn(Schema):
    recipient: Optional[str] = None  # defaults to the caller
    type: NotificationType = "general"
    title: str
    message: str
    priority: Priority = "medium"
    related_meeting: Optional[str] = None
    related_action_item: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    @field_validator("recipient")
    @classmethod
    def check_recipient(cls, v):
        return _object_id(v, "Valid recipient ID is required")

    @field_validator("title")
    @classmethod
    def check_title(cls, v):
        return _text(v, "Notification title is required (max 100 characters)", 1, 100)

    @field_validator("message")
    @classmethod
    def check_message(cls, v):
        return _text(v, "Notification message is required (max 300 characters)", 1, 300)

    @field_validator("scheduled_for", "expires_at")
    @classmethod
    def check_times(cls, v):
        return to_naive_utc(v)


class NotificationOut(Schema):
    id: str
    recipient: str
    type: NotificationType
    title: str
    message: str
    is_read: bool
    priority: Priority
    related_meeting: Optional[str] = None
    related_action_item: Optional[str] = None
    scheduled_for: Optional[UtcDateTime] = None
    sent_at: Optional[UtcDateTime] = None
    expires_at: Optional[UtcDateTime] = None
    created_at: Optional[UtcDateTime] = None

    @classmethod
    def from_entity(cls, n):
        return cls(
            id=n.id,
            recipient=n.recipient_id,
            type=n.type,
            title=n.title,
            message=n.message,
            is_read=n.is_read,
            priority=n.priority,
            related_meeting=n.related_meeting_id,
            related_action_item=n.related_action_item_id,
            scheduled_for=n.scheduled_for,
            sent_at=n.sent_at,
            expires_at=n.expires_at,
            created_at=n.created_at,
        )


class Pagination(Schema):
    current: int
    pages: int
    total: int
