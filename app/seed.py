"""
Load demo data (wipes existing rows).

    python -m app.seed
"""
import logging
from datetime import timedelta

from app.db import Base, SessionLocal, init_db
from app.entities import (
    ActionItem, Attendance, Decision, Meeting, MeetingAttendee, MeetingMinutes, Notification, User,
)
from app.services.auth_service import hash_password
from app.utils.common import utcnow

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "Password123"


def _attendee(user, status):
    return MeetingAttendee(user_id=user.id, email=user.email, name=user.name, status=status)


def seed(db) -> dict:
    """Insert demo users, meetings, attendance, minutes and notifications."""
    for table in reversed(Base.metadata.sorted_tables):
        db.execute(table.delete())

    now = utcnow()
    admin, john, jane, bob = users = [
        User(name="Admin User", email="admin@example.com", role="admin"),
        User(name="John Doe", email="john@example.com"),
        User(name="Jane Smith", email="jane@example.com"),
        User(name="Bob Johnson", email="bob@example.com"),
    ]
    for u in users:
        u.password_hash = hash_password(DEMO_PASSWORD)
    db.add_all(users)
    db.flush()

    standup = Meeting(
        title="Weekly Team Standup",
        description="Weekly team synchronization meeting to discuss progress and blockers",
        date=now + timedelta(days=1),
        start_time="09:00",
        end_time="10:00",
        location="Conference Room A",
        organizer_id=admin.id,
        attendees=[_attendee(john, "accepted"), _attendee(jane, "accepted"), _attendee(bob, "tentative")],
    )
    planning = Meeting(
        title="Project Planning Session",
        description="Planning session for the new product launch",
        date=now + timedelta(days=3),
        start_time="14:00",
        end_time="16:00",
        location="Virtual - Zoom",
        organizer_id=john.id,
        attendees=[_attendee(admin, "accepted"), _attendee(jane, "invited")],
        meeting_type="virtual",
        priority="high",
    )
    review = Meeting(
        title="Monthly Review",
        description="Monthly performance and goals review",
        date=now - timedelta(days=7),
        start_time="11:00",
        end_time="12:00",
        location="Conference Room B",
        organizer_id=admin.id,
        attendees=[_attendee(john, "accepted"), _attendee(jane, "accepted")],
        status="completed",
    )
    db.add_all([standup, planning, review])
    db.flush()

    db.add_all([
        Attendance(
            meeting_id=review.id, participant_user_id=john.id, participant_name=john.name,
            participant_email=john.email, status="present",
            check_in_time=review.date + timedelta(minutes=5), recorded_by_id=admin.id,
        ),
        Attendance(
            meeting_id=review.id, participant_user_id=jane.id, participant_name=jane.name,
            participant_email=jane.email, status="late", notes="Traffic delay",
            check_in_time=review.date + timedelta(minutes=15), recorded_by_id=admin.id,
        ),
    ])

    minutes = MeetingMinutes(
        meeting_id=review.id,
        content=(
            "Monthly Review Meeting Minutes\n\n"
            "Agenda:\n1. Review of last month's performance\n"
            "2. Discussion of upcoming goals\n3. Resource allocation"
        ),
        summary="Reviewed monthly performance and set goals for next month",
        key_points=["Performance exceeded targets by 15%", "Need to hire 2 additional developers"],
        next_meeting_date=now + timedelta(days=23),
        created_by_id=admin.id,
        is_approved=True,
        approved_by_id=admin.id,
        approved_at=now - timedelta(days=6),
    )
    minutes.action_items = [
        ActionItem(
            description="Prepare hiring plan for two developers",
            assignee_user_id=john.id, assignee_name=john.name, assignee_email=john.email,
            due_date=now + timedelta(days=7), priority="high",
        ),
        ActionItem(
            description="Update project timeline",
            assignee_user_id=jane.id, assignee_name=jane.name, assignee_email=jane.email,
            due_date=now + timedelta(days=5), status="in-progress",
        ),
    ]
    minutes.decisions = [
        Decision(description="Approved budget increase for Q4", impact="high"),
        Decision(description="Adopt weekly progress reports"),
    ]
    db.add(minutes)

    db.add_all([
        Notification(
            recipient_id=u.id, type="meeting-reminder", title="New Meeting Invitation",
            message=f'You have been invited to "{standup.title}"',
            related_meeting_id=standup.id, scheduled_for=standup.date - timedelta(hours=24),
        )
        for u in (john, jane, bob)
    ])
    db.commit()

    counts = {"users": len(users), "meetings": 3, "attendance": 2, "minutes": 1, "notifications": 3}
    logger.info("[Seed] %s", counts)
    return counts


def main():
    init_db()
    db = SessionLocal()
    try:
        counts = seed(db)
    finally:
        db.close()
    print(f"Seeded {counts}. Log in with any of the demo e-mails and password {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
