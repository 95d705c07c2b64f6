"""
Mail service.
Invitation and reminder e-mails over SMTP (SSL). Runs as a background task
after the response, so failures are logged and never reach the caller.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from app.config import MAIL_ENABLED, MAIL_FROM, SMTP_HOST, SMTP_PASS, SMTP_PORT, SMTP_USER
from app.models import ActionItemOut, MeetingOut
from app.utils.formatting import format_date

logger = logging.getLogger(__name__)


def send_mail(to: str, subject: str, html: str) -> bool:
    """
    Send one HTML e-mail.

    Returns:
        True when sent, False when mail is disabled or the send failed
    """
    if not MAIL_ENABLED:
        logger.debug("[Mail] Disabled, skipping mail to %s", to)
        return False
    msg = MIMEMultipart("alternative")
    msg["From"], msg["To"], msg["Subject"] = MAIL_FROM, to, subject
    msg.attach(MIMEText(html, "html", "utf-8"))
    try:
        with smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT) as s:
            s.login(SMTP_USER, SMTP_PASS)
            s.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("[Mail] Sending to %s failed: %s", to, e)
        return False
    logger.info("[Mail] Sent '%s' to %s", subject, to)
    return True


def _card(heading: str, color: str, background: str, rows, footer: str) -> str:
    body = "".join(f"<p><strong>{escape(k)}:</strong> {escape(str(v))}</p>" for k, v in rows)
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: {color};">{escape(heading)}</h2>'
        f'<div style="background-color: {background}; padding: 20px; border-radius: 8px; margin: 20px 0;">'
        f"{body}</div>"
        f"<p>{escape(footer)}</p>"
        "<p>Best regards,<br>Meeting Management System</p>"
        "</div>"
    )


def send_meeting_invitations(meeting: MeetingOut) -> int:
    """E-mail an invitation to every attendee, linked account or not."""
    html = _card(
        "Meeting Invitation", "#2563eb", "#f8fafc",
        [
            ("Title", meeting.title),
            ("Date", format_date(meeting.date)),
            ("Time", f"{meeting.start_time} - {meeting.end_time}"),
            ("Location", meeting.location),
            ("Description", meeting.description),
        ],
        "Please confirm your attendance.",
    )
    sent = 0
    for attendee in meeting.attendees:
        if send_mail(attendee.email, f"Meeting Invitation: {meeting.title}", html):
            sent += 1
    return sent


def send_action_item_reminder(item: ActionItemOut) -> bool:
    html = _card(
        "Action Item Reminder", "#dc2626", "#fee2e2",
        [
            ("Description", item.description),
            ("Due Date", format_date(item.due_date)),
            ("Priority", item.priority),
            ("Status", item.status),
        ],
        "Please complete this action item by the due date.",
    )
    return send_mail(item.assigned_to.email, f"Action Item Reminder: {item.description}", html)
