"""
Command line front end.

    python -m app.client.cli login --email a@b.com --password Secret1
    export API_TOKEN=...
    python -m app.client.cli meetings list --search review
    python -m app.client.cli minutes export <meeting id> --out ./exports
"""
import argparse
import logging
import re
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from app.client.api_client import ApiClient
from app.client.store import ClientData
from app.config import PDF_DIR
from app.errors import AppError
from app.models import AttendanceIn, MeetingIn, PersonIn
from app.services.pdf_service import export_attendance_pdf, export_meeting_pdf
from app.utils.formatting import format_date, format_short_date, render_table, status_label

logger = logging.getLogger(__name__)

ATTENDEE_RE = re.compile(r"^\s*(?P<name>[^<]+?)\s*<(?P<email>[^>]+)>\s*$")


def parse_attendee(value: str) -> dict:
    """'Jane Doe <jane@example.com>' or a bare e-mail address."""
    m = ATTENDEE_RE.match(value)
    if m:
        return {"name": m.group("name"), "email": m.group("email")}
    return {"name": value.split("@")[0], "email": value}


# =========================
# Views
# =========================
def show_meetings(data: ClientData, args) -> None:
    meetings, pagination = data.meetings.fetch(
        page=args.page, limit=args.limit, status=args.status, date=args.date, search=args.search,
    )
    print(render_table(
        ["ID", "Date", "Time", "Title", "Location", "Status"],
        [[m.id, format_short_date(m.date), f"{m.start_time}-{m.end_time}", m.title, m.location, m.status]
         for m in meetings],
    ))
    print(f"\nPage {pagination.current}/{pagination.pages} ({pagination.total} meetings)")


def show_meeting(data: ClientData, args) -> None:
    m = data.api.get_meeting(args.id)
    print(f"{m.title}\n{'=' * len(m.title)}")
    print(f"Date:      {format_date(m.date)} {m.start_time}-{m.end_time}")
    print(f"Location:  {m.location}")
    print(f"Organizer: {m.organizer.name if m.organizer else '-'}")
    print(f"Status:    {m.status} / {m.meeting_type} / {m.priority}")
    if m.tags:
        print(f"Tags:      {', '.join(m.tags)}")
    print(f"\n{m.description}\n")
    print(render_table(["Name", "Email", "Status"], [[a.name, a.email, a.status] for a in m.attendees]))


def create_meeting(data: ClientData, args) -> None:
    body = MeetingIn(
        title=args.title,
        description=args.description,
        date=args.date,
        start_time=args.start,
        end_time=args.end,
        location=args.location,
        attendees=[parse_attendee(a) for a in args.attendee],
        meeting_type=args.type,
        priority=args.priority,
        tags=args.tag or [],
    )
    meeting = data.create_meeting(body)
    print(f"Created meeting {meeting.id}")


def delete_meeting(data: ClientData, args) -> None:
    data.delete_meeting(args.id)
    print(f"Deleted meeting {args.id}")


def show_meeting_stats(data: ClientData, args) -> None:
    stats = data.api.meeting_stats()
    print(render_table(["Status", "Count"], list(stats["byStatus"].items())))
    print(f"\nTotal: {stats['totalMeetings']}  Upcoming: {stats['upcomingMeetings']}")


def show_attendance(data: ClientData, args) -> None:
    records, pagination = data.attendance.fetch(page=args.page, limit=args.limit, meeting_id=args.meeting)
    print(render_table(
        ["ID", "Meeting", "Name", "Email", "Status"],
        [[a.id, a.meeting.title if a.meeting else a.meeting_id, a.participant.name, a.participant.email,
          status_label(a.status)] for a in records],
    ))
    print(f"\nPage {pagination.current}/{pagination.pages} ({pagination.total} records)")


def record_attendance(data: ClientData, args) -> None:
    body = AttendanceIn(
        meeting=args.meeting,
        participant=PersonIn(name=args.name, email=args.email),
        status=args.status,
        notes=args.notes,
    )
    record = data.record_attendance(body)
    print(f"Recorded {record.participant.email} as {status_label(record.status)}")


def show_attendance_stats(data: ClientData, args) -> None:
    stats = data.api.attendance_stats(args.meeting)
    print(render_table(["Status", "Count"], [[status_label(s), c] for s, c in stats["byStatus"].items()]))
    print(f"\nTotal: {stats['totalRecords']}")


def show_minutes(data: ClientData, args) -> None:
    items, pagination = data.minutes.fetch(page=args.page, limit=args.limit, meeting_id=args.meeting)
    print(render_table(
        ["ID", "Meeting", "Actions", "Approved", "Created"],
        [[m.id, m.meeting.title if m.meeting else m.meeting_id, len(m.action_items),
          "yes" if m.is_approved else "no", format_short_date(m.created_at)] for m in items],
    ))
    print(f"\nPage {pagination.current}/{pagination.pages} ({pagination.total} minutes)")


def show_minutes_detail(data: ClientData, args) -> None:
    m = data.api.get_minutes(args.id)
    print(m.meeting.title if m.meeting else m.meeting_id)
    print(m.content)
    if m.decisions:
        print("\nDecisions:")
        for n, d in enumerate(m.decisions, 1):
            print(f"  {n}. {d.description} ({d.impact})")
    if m.action_items:
        print()
        print(render_table(
            ["ID", "Description", "Assignee", "Due", "Status"],
            [[i.id, i.description, i.assigned_to.name, format_short_date(i.due_date), i.status]
             for i in m.action_items],
        ))


def approve_minutes(data: ClientData, args) -> None:
    m = data.approve_minutes(args.id)
    print(f"Minutes {m.id} approved by {m.approved_by.name if m.approved_by else '-'}")


def _all_attendance(data: ClientData, meeting_id: str):
    records, page = [], 1
    while True:
        batch, pagination = data.api.list_attendance(page=page, limit=100, meeting_id=meeting_id)
        records.extend(batch)
        if page >= pagination.pages:
            return records
        page += 1


def export_minutes(data: ClientData, args) -> List[Path]:
    meeting = data.api.get_meeting(args.meeting)
    found, _ = data.api.list_minutes(meeting_id=meeting.id, limit=1)
    attendances = _all_attendance(data, meeting.id)

    out = Path(args.out) if args.out else PDF_DIR
    out.mkdir(parents=True, exist_ok=True)
    written = []
    for result in (
        export_meeting_pdf(meeting, found[0] if found else None, attendances),
        export_attendance_pdf(meeting, attendances),
    ):
        path = out / result.filename
        path.write_bytes(result.content)
        written.append(path)
        print(f"Wrote {path} ({result.pages} page(s))")
    return written


def show_notifications(data: ClientData, args) -> None:
    items, pagination, unread = data.notifications.fetch(page=args.page, limit=args.limit, is_read=args.read)
    print(render_table(
        ["ID", "", "Type", "Title", "Created"],
        [[n.id, " " if n.is_read else "*", n.type, n.title, format_short_date(n.created_at)] for n in items],
    ))
    print(f"\n{unread} unread, page {pagination.current}/{pagination.pages}")


def read_notification(data: ClientData, args) -> None:
    data.mark_notification_read(args.id)
    print("Marked as read")


def read_all_notifications(data: ClientData, args) -> None:
    print(f"Marked {data.mark_all_notifications_read()} notification(s) as read")


def login(data: ClientData, args) -> None:
    user = data.api.login(args.email, args.password)
    print(f"Logged in as {user.name} <{user.email}>")
    print(f"export API_TOKEN={data.api.token}")


# =========================
# Parser
# =========================
def _paging(p):
    p.add_argument("--page", type=int, default=1)
    p.add_argument("--limit", type=int, default=10)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meetings", description="Meeting management client")
    parser.add_argument("--base-url", help="API base URL (default: API_BASE_URL)")
    parser.add_argument("--token", help="bearer token (default: API_TOKEN)")
    sub = parser.add_subparsers(dest="resource", required=True)

    p = sub.add_parser("login")
    p.add_argument("--email", required=True)
    p.add_argument("--password", required=True)
    p.set_defaults(func=login)

    meetings = sub.add_parser("meetings").add_subparsers(dest="action", required=True)
    p = meetings.add_parser("list")
    _paging(p)
    p.add_argument("--status")
    p.add_argument("--date", help="YYYY-MM-DD")
    p.add_argument("--search")
    p.set_defaults(func=show_meetings)
    p = meetings.add_parser("show")
    p.add_argument("id")
    p.set_defaults(func=show_meeting)
    p = meetings.add_parser("create")
    p.add_argument("--title", required=True)
    p.add_argument("--description", required=True)
    p.add_argument("--date", required=True, help="ISO date/time")
    p.add_argument("--start", required=True, help="HH:MM")
    p.add_argument("--end", required=True, help="HH:MM")
    p.add_argument("--location", required=True)
    p.add_argument("--attendee", action="append", required=True, help="'Name <email>' (repeatable)")
    p.add_argument("--type", default="in-person", choices=["in-person", "virtual", "hybrid"])
    p.add_argument("--priority", default="medium", choices=["low", "medium", "high", "urgent"])
    p.add_argument("--tag", action="append")
    p.set_defaults(func=create_meeting)
    p = meetings.add_parser("delete")
    p.add_argument("id")
    p.set_defaults(func=delete_meeting)
    p = meetings.add_parser("stats")
    p.set_defaults(func=show_meeting_stats)

    attendance = sub.add_parser("attendance").add_subparsers(dest="action", required=True)
    p = attendance.add_parser("list")
    _paging(p)
    p.add_argument("--meeting")
    p.set_defaults(func=show_attendance)
    p = attendance.add_parser("record")
    p.add_argument("--meeting", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--email", required=True)
    p.add_argument("--status", required=True, choices=["present", "absent", "late", "excused"])
    p.add_argument("--notes")
    p.set_defaults(func=record_attendance)
    p = attendance.add_parser("stats")
    p.add_argument("--meeting")
    p.set_defaults(func=show_attendance_stats)

    minutes = sub.add_parser("minutes").add_subparsers(dest="action", required=True)
    p = minutes.add_parser("list")
    _paging(p)
    p.add_argument("--meeting")
    p.set_defaults(func=show_minutes)
    p = minutes.add_parser("show")
    p.add_argument("id")
    p.set_defaults(func=show_minutes_detail)
    p = minutes.add_parser("approve")
    p.add_argument("id")
    p.set_defaults(func=approve_minutes)
    p = minutes.add_parser("export")
    p.add_argument("meeting")
    p.add_argument("--out", help="output directory (default: PDF_DIR)")
    p.set_defaults(func=export_minutes)

    notifications = sub.add_parser("notifications").add_subparsers(dest="action", required=True)
    p = notifications.add_parser("list")
    _paging(p)
    p.add_argument("--unread", dest="read", action="store_const", const=False)
    p.set_defaults(func=show_notifications)
    p = notifications.add_parser("read")
    p.add_argument("id")
    p.set_defaults(func=read_notification)
    p = notifications.add_parser("read-all")
    p.set_defaults(func=read_all_notifications)

    return parser


def main(argv: Optional[List[str]] = None, api: Optional[ApiClient] = None) -> int:
    args = build_parser().parse_args(argv)
    if api is None:
        kwargs = {}
        if args.base_url:
            kwargs["base_url"] = args.base_url
        if args.token:
            kwargs["token"] = args.token
        api = ApiClient(**kwargs)

    data = ClientData(api)
    try:
        args.func(data, args)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            print(f"{field}: {err['msg'].replace('Value error, ', '')}", file=sys.stderr)
        return 2
    except AppError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        for err in e.errors:
            print(f"  {err.get('field')}: {err.get('message')}", file=sys.stderr)
        return 1
    finally:
        api.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
