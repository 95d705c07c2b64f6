"""
PDF service.
Lays out the full meeting record and the attendance roster with ReportLab.

Both documents are written top to bottom with a running cursor ``y``:
before any line or block is drawn, the space it needs is checked against
the bottom margin and a new page is started when it would not fit.
"""
import io
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.pdfgen import canvas

from app.models import AttendanceOut, MeetingOut, MinutesOut
from app.utils.formatting import (
    ATTENDANCE_LABELS, export_filename, format_date, format_short_date, format_time, status_label,
)
from app.utils.common import utcnow

logger = logging.getLogger(__name__)

# ---- Page and styles
PAGE_W, PAGE_H = A4
MARGIN_L, MARGIN_R, MARGIN_T, MARGIN_B = 20*mm, 20*mm, 18*mm, 18*mm
TITLE_SIZE, H_SIZE, BODY_SIZE, META_SIZE, SMALL = 16, 12, 10.5, 10, 9
LINE_H, SEC_GAP = 5.2*mm, 6.5*mm
X0, X1 = MARGIN_L, PAGE_W - MARGIN_R
CONTENT_W = X1 - X0

# CID font, so names outside Latin-1 still render
FONT = "HeiseiKakuGo-W5"
pdfmetrics.registerFont(UnicodeCIDFont(FONT))

C_PRIMARY = colors.HexColor("#1f2937")
C_ACCENT = colors.HexColor("#2563eb")
C_BORDER = colors.HexColor("#e5e7eb")
C_MUTED = colors.HexColor("#6b7280")
C_BAR = colors.HexColor("#f3f4f6")

# Attendance table columns: (label, x offset, width)
TABLE_COLUMNS = [
    ("No.", 0, 10*mm),
    ("Name", 10*mm, 45*mm),
    ("Email", 55*mm, 60*mm),
    ("Status", 115*mm, 25*mm),
    ("Check-in", 140*mm, 30*mm),
]


@dataclass
class PdfResult:
    filename: str
    content: bytes
    pages: int
    # pages on which the attendance table header row was drawn
    header_pages: List[int] = field(default_factory=list)


def wrap_text(text: Optional[str], font_name: str, font_size: float, max_width: float) -> List[str]:
    """
    Greedy wrap by rendered width. Breaks at spaces when possible and
    falls back to per-character breaks for words wider than the line.
    """
    if not text:
        return ["-"]
    lines = []
    for raw in text.splitlines():
        if raw.strip() == "":
            lines.append("")
            continue
        buf = ""
        for word in raw.split(" "):
            candidate = f"{buf} {word}" if buf else word
            if pdfmetrics.stringWidth(candidate, font_name, font_size) <= max_width:
                buf = candidate
                continue
            if buf:
                lines.append(buf)
                buf = ""
            # a single word wider than the line
            for ch in word:
                nb = buf + ch
                if pdfmetrics.stringWidth(nb, font_name, font_size) <= max_width:
                    buf = nb
                else:
                    lines.append(buf)
                    buf = ch
        lines.append(buf)
    return lines


def _fit(text: str, width: float, size: float = BODY_SIZE) -> str:
    """Clip a table cell to its column width."""
    text = text or "-"
    if pdfmetrics.stringWidth(text, FONT, size) <= width:
        return text
    while text and pdfmetrics.stringWidth(text + "...", FONT, size) > width:
        text = text[:-1]
    return text + "..."


class PageWriter:
    """Canvas plus cursor; tracks how many pages were emitted."""

    def __init__(self, footer: str):
        self.buffer = io.BytesIO()
        self.c = canvas.Canvas(self.buffer, pagesize=A4)
        self.footer = footer
        self.pages = 1
        self.y = PAGE_H - MARGIN_T
        self.on_new_page = None

    def _draw_footer(self):
        self.c.setFont(FONT, SMALL)
        self.c.setFillColor(C_MUTED)
        self.c.drawString(X0, MARGIN_B - 8*mm, self.footer)
        self.c.drawRightString(X1, MARGIN_B - 8*mm, f"Page {self.pages}")

    def new_page(self):
        self._draw_footer()
        self.c.showPage()
        self.pages += 1
        self.y = PAGE_H - MARGIN_T
        if self.on_new_page:
            self.on_new_page()

    def ensure(self, needed: float):
        if self.y - needed < MARGIN_B:
            self.new_page()

    def title(self, text: str, right: str = ""):
        self.c.setFont(FONT, TITLE_SIZE)
        self.c.setFillColor(C_PRIMARY)
        self.c.drawString(X0, self.y, text)
        if right:
            self.c.setFont(FONT, SMALL)
            self.c.setFillColor(C_MUTED)
            self.c.drawRightString(X1, self.y, right)
        self.y -= 8*mm

    def meta_card(self, rows: Sequence):
        """Bordered card with label/value rows."""
        height = (len(rows) * 6 + 4) * mm
        self.ensure(height)
        top = self.y
        self.c.setStrokeColor(C_BORDER)
        self.c.setLineWidth(0.6)
        self.c.rect(X0, top - height, CONTENT_W, height, stroke=1, fill=0)
        self.y = top - 7*mm
        for label, value in rows:
            self.c.setFont(FONT, META_SIZE)
            self.c.setFillColor(C_MUTED)
            self.c.drawString(X0 + 6*mm, self.y, label)
            self.c.setFillColor(colors.black)
            self.c.drawString(X0 + 35*mm, self.y, _fit(str(value or "-"), CONTENT_W - 40*mm, META_SIZE))
            self.y -= 6*mm
        self.y = top - height - 4*mm

    def section_bar(self, title: str):
        # keep the bar together with at least one body line
        self.ensure(12*mm + LINE_H)
        self.c.setFillColor(C_BAR)
        self.c.rect(X0, self.y - 7*mm, CONTENT_W, 9*mm, stroke=0, fill=1)
        self.c.setFont(FONT, H_SIZE)
        self.c.setFillColor(C_PRIMARY)
        self.c.drawString(X0 + 6*mm, self.y - 5*mm, title)
        self.y -= 12*mm

    def line(self, text: str, indent: float = 6*mm, size: float = BODY_SIZE):
        self.ensure(LINE_H)
        self.c.setFont(FONT, size)
        self.c.setFillColor(colors.black)
        self.c.drawString(X0 + indent, self.y, text)
        self.y -= LINE_H

    def paragraph(self, text: str, indent: float = 6*mm):
        for ln in wrap_text(text, FONT, BODY_SIZE, CONTENT_W - indent):
            self.line(ln, indent)

    def numbered(self, items: Sequence[str]):
        """Numbered list; continuation lines hang under the text."""
        for n, text in enumerate(items, 1):
            prefix = f"{n}. "
            hang = 6*mm + pdfmetrics.stringWidth(prefix, FONT, BODY_SIZE)
            lines = wrap_text(text, FONT, BODY_SIZE, CONTENT_W - hang)
            self.line(prefix + lines[0])
            for ln in lines[1:]:
                self.line(ln, hang)

    def gap(self, amount: float = SEC_GAP):
        self.y -= amount

    def finish(self) -> bytes:
        self._draw_footer()
        self.c.showPage()
        self.c.save()
        return self.buffer.getvalue()


def _footer() -> str:
    return f"Printed on: {format_date(utcnow())}"


def _meeting_rows(meeting: MeetingOut, with_organizer: bool = True):
    rows = [
        ("Title", meeting.title),
        ("Date", format_date(meeting.date)),
        ("Time", f"{meeting.start_time} - {meeting.end_time}"),
        ("Location", meeting.location),
    ]
    if with_organizer:
        rows.append(("Organizer", meeting.organizer.name if meeting.organizer else "-"))
    return rows


# =========================
# Full meeting record
# =========================
def export_meeting_pdf(
    meeting: MeetingOut,
    minutes: Optional[MinutesOut] = None,
    attendances: Optional[Sequence[AttendanceOut]] = None,
) -> PdfResult:
    """
    Full meeting record: metadata, attendee roster, attendance, minutes
    content, decisions, key points and action items.

    Args:
        meeting: the meeting as returned by the API
        minutes: its minutes, if any
        attendances: its attendance records, if any

    Returns:
        PdfResult with the "Minutes_<title>_<date>.pdf" filename
    """
    w = PageWriter(_footer())
    w.title("MEETING MINUTES", format_date(meeting.date))
    w.meta_card(_meeting_rows(meeting))

    if meeting.attendees:
        w.section_bar("Attendees")
        w.numbered([f"{a.name} ({a.email})" for a in meeting.attendees])
        w.gap()

    if attendances:
        w.section_bar("Attendance")
        w.numbered([f"{a.participant.name} - {status_label(a.status)}" for a in attendances])
        w.gap()

    if minutes:
        w.section_bar("Discussion")
        w.paragraph(minutes.content)
        w.gap()

        if minutes.summary:
            w.section_bar("Summary")
            w.paragraph(minutes.summary)
            w.gap()

        if minutes.decisions:
            w.section_bar("Decisions")
            w.numbered([f"{d.description} (impact: {d.impact})" for d in minutes.decisions])
            w.gap()

        if minutes.key_points:
            w.section_bar("Key Points")
            w.numbered(minutes.key_points)
            w.gap()

        if minutes.action_items:
            w.section_bar("Action Items")
            w.numbered([
                f"{i.description} (PIC: {i.assigned_to.name}, Deadline: {format_short_date(i.due_date)})"
                for i in minutes.action_items
            ])
            w.gap()

        if minutes.next_meeting_date:
            w.section_bar("Next Meeting")
            w.line(format_date(minutes.next_meeting_date))

    content = w.finish()
    filename = export_filename("Minutes", meeting.title, meeting.date)
    logger.info("[PDF] %s: %d page(s)", filename, w.pages)
    return PdfResult(filename=filename, content=content, pages=w.pages)


# =========================
# Attendance roster
# =========================
def export_attendance_pdf(meeting: MeetingOut, attendances: Sequence[AttendanceOut]) -> PdfResult:
    """
    Attendance roster table with a tally summary. The column header row is
    repeated at the top of every page the table continues onto.
    """
    w = PageWriter(_footer())
    header_pages: List[int] = []

    def table_header():
        w.ensure(2 * LINE_H)
        w.c.setFont(FONT, BODY_SIZE)
        w.c.setFillColor(C_PRIMARY)
        for label, dx, _ in TABLE_COLUMNS:
            w.c.drawString(X0 + dx, w.y, label)
        w.c.setStrokeColor(C_ACCENT)
        w.c.setLineWidth(0.8)
        w.c.line(X0, w.y - 2*mm, X1, w.y - 2*mm)
        w.y -= LINE_H + 2*mm
        header_pages.append(w.pages)

    w.title("ATTENDANCE LIST", format_date(meeting.date))
    w.meta_card(_meeting_rows(meeting, with_organizer=False))
    w.gap()

    w.on_new_page = table_header
    table_header()
    for n, a in enumerate(attendances, 1):
        w.ensure(LINE_H)
        w.c.setFont(FONT, BODY_SIZE)
        w.c.setFillColor(colors.black)
        cells = [
            f"{n}.",
            a.participant.name,
            a.participant.email,
            status_label(a.status),
            format_time(a.check_in_time),
        ]
        for (label, dx, width), text in zip(TABLE_COLUMNS, cells):
            w.c.drawString(X0 + dx, w.y, _fit(text, width - 2*mm))
        w.y -= LINE_H
    w.on_new_page = None

    w.gap()
    w.section_bar("Summary")
    w.line(f"Total participants: {len(attendances)}")
    for status, label in ATTENDANCE_LABELS.items():
        w.line(f"{label}: {sum(1 for a in attendances if a.status == status)}")

    content = w.finish()
    filename = export_filename("Attendance", meeting.title, meeting.date)
    logger.info("[PDF] %s: %d page(s), %d record(s)", filename, w.pages, len(attendances))
    return PdfResult(filename=filename, content=content, pages=w.pages, header_pages=header_pages)
