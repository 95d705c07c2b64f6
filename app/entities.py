"""
Persistent entities (SQLAlchemy mapped classes).

Sub-documents of a meeting or of its minutes (attendees, action items,
decisions) are owned child rows keyed by their own stable id.
Attendance and minutes point at meetings by id only: there is no
database-level foreign key, so deleting a meeting leaves them in place.
"""
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import relationship

from app.db import Base
from app.utils.common import new_id, utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(10), nullable=False, default="user")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User {self.id} {self.email}>"


class Meeting(Base):
    __tablename__ = "meetings"

    id = Column(String(32), primary_key=True, default=new_id)
    title = Column(String(100), nullable=False)
    description = Column(String(500), nullable=False)
    date = Column(DateTime, nullable=False, index=True)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    location = Column(String(255), nullable=False)
    organizer_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="scheduled")
    meeting_type = Column(String(20), nullable=False, default="in-person")
    priority = Column(String(10), nullable=False, default="medium")
    tags = Column(JSON, nullable=False, default=list)
    attachments = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organizer = relationship("User", lazy="joined")
    attendees = relationship(
        "MeetingAttendee",
        back_populates="meeting",
        cascade="all, delete-orphan",
        order_by="MeetingAttendee.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Meeting {self.id} - {self.title}>"


class MeetingAttendee(Base):
    __tablename__ = "meeting_attendees"

    id = Column(String(32), primary_key=True, default=new_id)
    meeting_id = Column(String(32), ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    user_id = Column(String(32), nullable=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    status = Column(String(20), nullable=False, default="invited")

    meeting = relationship("Meeting", back_populates="attendees")


class Attendance(Base):
    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("meeting_id", "participant_email", name="uq_attendance_meeting_email"),
    )

    id = Column(String(32), primary_key=True, default=new_id)
    meeting_id = Column(String(32), nullable=False, index=True)
    participant_user_id = Column(String(32), nullable=True)
    participant_name = Column(String(100), nullable=False)
    participant_email = Column(String(255), nullable=False)
    status = Column(String(10), nullable=False)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    notes = Column(String(200), nullable=True)
    recorded_by_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    meeting = relationship(
        "Meeting",
        primaryjoin="foreign(Attendance.meeting_id) == Meeting.id",
        viewonly=True,
        lazy="joined",
    )
    recorded_by = relationship("User", lazy="joined")


class MeetingMinutes(Base):
    __tablename__ = "meeting_minutes"

    id = Column(String(32), primary_key=True, default=new_id)
    meeting_id = Column(String(32), nullable=False, unique=True)
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=True)
    key_points = Column(JSON, nullable=False, default=list)
    next_meeting_date = Column(DateTime, nullable=True)
    created_by_id = Column(String(32), ForeignKey("users.id"), nullable=False)
    last_modified_by_id = Column(String(32), ForeignKey("users.id"), nullable=True)
    is_approved = Column(Boolean, nullable=False, default=False)
    approved_by_id = Column(String(32), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    meeting = relationship(
        "Meeting",
        primaryjoin="foreign(MeetingMinutes.meeting_id) == Meeting.id",
        viewonly=True,
        lazy="joined",
    )
    created_by = relationship("User", foreign_keys=[created_by_id], lazy="joined")
    last_modified_by = relationship("User", foreign_keys=[last_modified_by_id], lazy="joined")
    approved_by = relationship("User", foreign_keys=[approved_by_id], lazy="joined")
    action_items = relationship(
        "ActionItem",
        back_populates="minutes",
        cascade="all, delete-orphan",
        order_by="ActionItem.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )
    decisions = relationship(
        "Decision",
        back_populates="minutes",
        cascade="all, delete-orphan",
        order_by="Decision.position",
        collection_class=ordering_list("position"),
        lazy="selectin",
    )


class ActionItem(Base):
    __tablename__ = "action_items"

    id = Column(String(32), primary_key=True, default=new_id)
    minutes_id = Column(String(32), ForeignKey("meeting_minutes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(300), nullable=False)
    assignee_user_id = Column(String(32), nullable=True)
    assignee_name = Column(String(100), nullable=False)
    assignee_email = Column(String(255), nullable=False)
    due_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="pending")
    priority = Column(String(10), nullable=False, default="medium")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    minutes = relationship("MeetingMinutes", back_populates="action_items")


class Decision(Base):
    __tablename__ = "decisions"

    id = Column(String(32), primary_key=True, default=new_id)
    minutes_id = Column(String(32), ForeignKey("meeting_minutes.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    description = Column(String(300), nullable=False)
    impact = Column(String(10), nullable=False, default="medium")

    minutes = relationship("MeetingMinutes", back_populates="decisions")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, default=new_id)
    recipient_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(30), nullable=False)
    title = Column(String(100), nullable=False)
    message = Column(String(300), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, index=True)
    priority = Column(String(10), nullable=False, default="medium")
    # a cancelled meeting is gone by the time its notification is read
    related_meeting_id = Column(String(32), nullable=True)
    related_action_item_id = Column(String(32), nullable=True)
    scheduled_for = Column(DateTime, nullable=True, index=True)
    sent_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
