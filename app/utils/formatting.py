"""
Display formatting shared by the PDF exporter, mail templates and CLI views.
"""
import re
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

ATTENDANCE_LABELS = {
    "present": "Present",
    "absent": "Absent",
    "late": "Late",
    "excused": "Excused",
}


def format_date(dt: Optional[datetime]) -> str:
    """'05 November 2026'"""
    return dt.strftime("%d %B %Y") if dt else "-"


def format_short_date(dt: Optional[datetime]) -> str:
    return dt.strftime("%d %b %Y") if dt else "-"


def format_time(dt: Optional[datetime]) -> str:
    return dt.strftime("%H:%M") if dt else "-"


def status_label(status: str) -> str:
    return ATTENDANCE_LABELS.get(status, status)


def export_filename(prefix: str, title: str, date: datetime) -> str:
    """
    Build a PDF filename from a meeting title and date.

    Every non-alphanumeric character of the title becomes '_':
    ("Minutes", "Q3 Review!", 2026-11-05) -> "Minutes_Q3_Review__2026-11-05.pdf"
    """
    safe = re.sub(r"[^a-zA-Z0-9]", "_", title or "")
    return f"{prefix}_{safe}_{date.strftime('%Y-%m-%d')}.pdf"


def truncate(text: Optional[str], width: int) -> str:
    text = text or ""
    return text if len(text) <= width else text[: max(width - 1, 0)] + "…"


def render_table(headers: Sequence[str], rows: Iterable[Sequence], max_width: int = 40) -> str:
    """Fixed-width text table for terminal list views."""
    cells: List[List[str]] = [[truncate(str(c), max_width) for c in row] for row in rows]
    widths = [len(h) for h in headers]
    for row in cells:
        for i, c in enumerate(row):
            widths[i] = max(widths[i], len(c))
    line = "  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    out = [line, "  ".join("-" * w for w in widths)]
    for row in cells:
        out.append("  ".join(c.ljust(widths[i]) for i, c in enumerate(row)))
    return "\n".join(out)
