from datetime import datetime

import pytest
from reportlab.pdfbase import pdfmetrics

from app.models import (
    ActionItemOut, AttendanceOut, AttendeeOut, DecisionOut, MeetingOut, MinutesOut, Person, UserRef,
)
from app.services.pdf_service import (
    BODY_SIZE, FONT, export_attendance_pdf, export_meeting_pdf, wrap_text,
)

DATE = datetime(2026, 11, 5, 9, 0)


def _meeting(n_attendees=2, title="Q3 Review!"):
    return MeetingOut(
        id="a" * 32,
        title=title,
        description="Quarterly review of goals",
        date=DATE,
        start_time="09:00",
        end_time="10:00",
        location="Room 1",
        organizer=UserRef(id="b" * 32, name="Alice", email="alice@example.com"),
        attendees=[
            AttendeeOut(id=f"{i:032x}", name=f"Person {i}", email=f"p{i}@example.com", status="invited")
            for i in range(n_attendees)
        ],
        status="scheduled",
        meeting_type="in-person",
        priority="medium",
    )


def _attendance(n):
    statuses = ["present", "absent", "late", "excused"]
    return [
        AttendanceOut(
            id=f"{i:032x}",
            meeting_id="a" * 32,
            participant=Person(name=f"Person {i}", email=f"p{i}@example.com"),
            status=statuses[i % 4],
            check_in_time=DATE if statuses[i % 4] == "present" else None,
        )
        for i in range(n)
    ]


def _minutes(n_items):
    return MinutesOut(
        id="c" * 32,
        meeting_id="a" * 32,
        content="We went through every goal. " * 40,
        action_items=[
            ActionItemOut(
                id=f"{i:032x}",
                description=f"Follow up on topic {i}",
                assigned_to=Person(name="Bob", email="bob@example.com"),
                due_date=DATE,
                status="pending",
                priority="medium",
            )
            for i in range(n_items)
        ],
        decisions=[DecisionOut(id=f"{i:032x}", description=f"Decision {i}") for i in range(n_items)],
        key_points=[f"Point {i}" for i in range(n_items)],
    )


def test_small_meeting_fits_one_page():
    result = export_meeting_pdf(_meeting())
    assert result.pages == 1
    assert result.content.startswith(b"%PDF")
    assert result.filename == "Minutes_Q3_Review__2026-11-05.pdf"


def test_long_meeting_spans_pages():
    result = export_meeting_pdf(_meeting(40), _minutes(40), _attendance(40))
    assert result.pages > 1
    assert result.content.startswith(b"%PDF")


def test_attendance_single_page():
    result = export_attendance_pdf(_meeting(), _attendance(5))
    assert result.pages == 1
    assert result.header_pages == [1]
    assert result.filename == "Attendance_Q3_Review__2026-11-05.pdf"


def test_attendance_header_repeats_on_every_table_page():
    result = export_attendance_pdf(_meeting(), _attendance(150))
    assert result.pages > 2
    assert result.header_pages[0] == 1
    # one header per page the table runs over, no gaps
    assert result.header_pages == list(range(1, len(result.header_pages) + 1))
    assert len(result.header_pages) >= 3
    # only the tally summary may spill past the table
    assert result.pages - result.header_pages[-1] in (0, 1)


def test_empty_attendance_still_renders():
    result = export_attendance_pdf(_meeting(), [])
    assert result.pages == 1
    assert result.header_pages == [1]


@pytest.mark.parametrize("width", [60, 150, 400])
def test_wrap_text_respects_width(width):
    text = "A fairly long sentence that has to be broken across several lines. " * 5
    lines = wrap_text(text, FONT, BODY_SIZE, width)
    assert len(lines) > 1
    assert all(pdfmetrics.stringWidth(ln, FONT, BODY_SIZE) <= width for ln in lines)
    assert " ".join(ln for ln in lines if ln).split() == text.split()


def test_wrap_text_breaks_long_words():
    word = "x" * 200
    lines = wrap_text(word, FONT, BODY_SIZE, 50)
    assert len(lines) > 1
    assert "".join(lines) == word


def test_wrap_text_keeps_blank_lines():
    assert wrap_text("one\n\ntwo", FONT, BODY_SIZE, 400) == ["one", "", "two"]
    assert wrap_text("", FONT, BODY_SIZE, 400) == ["-"]
