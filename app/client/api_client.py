"""
HTTP client for the meeting management API.

Unwraps the ``{success, message, data}`` envelope and turns error
envelopes back into the matching exception from ``app.errors``.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from app.config import API_BASE_URL, API_TOKEN
from app.errors import NetworkError, error_from_response
from app.models import (
    ActionItemOut, AttendanceOut, MeetingOut, MinutesOut, NotificationOut, Pagination, UserOut,
)

logger = logging.getLogger(__name__)


def _body(model) -> Dict[str, Any]:
    if hasattr(model, "model_dump"):
        return model.model_dump(mode="json", by_alias=True, exclude_none=True)
    return model


class ApiClient:
    """Synchronous API client; one instance per session/token."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: Optional[str] = API_TOKEN or None,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.token = token
        self.client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # =========================
    # Transport
    # =========================
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, path: str, **kwargs) -> Any:
        """
        Send one request and return the envelope's ``data``.

        Raises:
            AppError subclass matching the response status
            NetworkError: the server could not be reached
        """
        try:
            response = self.client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error: {e}")
        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}
        if response.status_code >= 400 or not payload.get("success", True):
            logger.debug("[Client] %s %s -> %s", method, path, response.status_code)
            raise error_from_response(response.status_code, payload)
        return payload.get("data")

    def _page(self, path: str, key: str, model, params: Dict[str, Any]) -> Tuple[list, Pagination]:
        params = {k: v for k, v in params.items() if v is not None}
        data = self.request("GET", path, params=params)
        return [model.model_validate(i) for i in data[key]], Pagination.model_validate(data["pagination"])

    # =========================
    # Auth
    # =========================
    def login(self, email: str, password: str) -> UserOut:
        data = self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return UserOut.model_validate(data["user"])

    def register(self, name: str, email: str, password: str) -> UserOut:
        data = self.request("POST", "/auth/register", json={"name": name, "email": email, "password": password})
        self.token = data["token"]
        return UserOut.model_validate(data["user"])

    def profile(self) -> UserOut:
        return UserOut.model_validate(self.request("GET", "/auth/profile")["user"])

    # =========================
    # Meetings
    # =========================
    def list_meetings(self, page=None, limit=None, status=None, date=None, search=None):
        return self._page("/meetings", "meetings", MeetingOut, {
            "page": page, "limit": limit, "status": status,
            "date": str(date) if date else None, "search": search,
        })

    def get_meeting(self, meeting_id: str) -> MeetingOut:
        return MeetingOut.model_validate(self.request("GET", f"/meetings/{meeting_id}"))

    def create_meeting(self, body) -> MeetingOut:
        return MeetingOut.model_validate(self.request("POST", "/meetings", json=_body(body)))

    def update_meeting(self, meeting_id: str, body) -> MeetingOut:
        return MeetingOut.model_validate(self.request("PUT", f"/meetings/{meeting_id}", json=_body(body)))

    def delete_meeting(self, meeting_id: str) -> None:
        self.request("DELETE", f"/meetings/{meeting_id}")

    def meeting_stats(self) -> Dict[str, Any]:
        return self.request("GET", "/meetings/stats")

    # =========================
    # Attendance
    # =========================
    def list_attendance(self, page=None, limit=None, meeting_id=None):
        return self._page("/attendance", "attendance", AttendanceOut, {
            "page": page, "limit": limit, "meetingId": meeting_id,
        })

    def record_attendance(self, body) -> AttendanceOut:
        return AttendanceOut.model_validate(self.request("POST", "/attendance", json=_body(body)))

    def update_attendance(self, attendance_id: str, body) -> AttendanceOut:
        return AttendanceOut.model_validate(self.request("PUT", f"/attendance/{attendance_id}", json=_body(body)))

    def attendance_stats(self, meeting_id: Optional[str] = None) -> Dict[str, Any]:
        params = {"meetingId": meeting_id} if meeting_id else None
        return self.request("GET", "/attendance/stats", params=params)

    # =========================
    # Minutes
    # =========================
    def list_minutes(self, page=None, limit=None, meeting_id=None):
        return self._page("/minutes", "minutes", MinutesOut, {
            "page": page, "limit": limit, "meetingId": meeting_id,
        })

    def get_minutes(self, minutes_id: str) -> MinutesOut:
        return MinutesOut.model_validate(self.request("GET", f"/minutes/{minutes_id}"))

    def create_minutes(self, body) -> MinutesOut:
        return MinutesOut.model_validate(self.request("POST", "/minutes", json=_body(body)))

    def update_minutes(self, minutes_id: str, body) -> MinutesOut:
        return MinutesOut.model_validate(self.request("PUT", f"/minutes/{minutes_id}", json=_body(body)))

    def approve_minutes(self, minutes_id: str) -> MinutesOut:
        return MinutesOut.model_validate(self.request("PUT", f"/minutes/{minutes_id}/approve"))

    def update_action_item(self, minutes_id: str, item_id: str, body) -> ActionItemOut:
        data = self.request("PUT", f"/minutes/{minutes_id}/action-items/{item_id}", json=_body(body))
        return ActionItemOut.model_validate(data)

    # =========================
    # Notifications
    # =========================
    def list_notifications(self, page=None, limit=None, is_read: Optional[bool] = None):
        params = {"page": page, "limit": limit}
        if is_read is not None:
            params["isRead"] = "true" if is_read else "false"
        params = {k: v for k, v in params.items() if v is not None}
        data = self.request("GET", "/notifications", params=params)
        items: List[NotificationOut] = [NotificationOut.model_validate(n) for n in data["notifications"]]
        return items, Pagination.model_validate(data["pagination"]), data.get("unreadCount", 0)

    def mark_notification_read(self, notification_id: str) -> NotificationOut:
        return NotificationOut.model_validate(self.request("PUT", f"/notifications/{notification_id}/read"))

    def mark_all_notifications_read(self) -> int:
        return self.request("PUT", "/notifications/read-all")["updated"]

    def delete_notification(self, notification_id: str) -> None:
        self.request("DELETE", f"/notifications/{notification_id}")
