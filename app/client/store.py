"""
Client-side data layer.

One ResourceStore per collection (meetings, attendance, minutes,
notifications). Each store owns its loading/error state and is
invalidated on its own; a mutation only invalidates the stores whose
data it can change. Every fetch is tagged with a generation number and a
response is only applied if no newer fetch or invalidation happened in
the meantime.
"""
import logging
import threading
from typing import Any, Callable, Dict, Optional

from app.client.api_client import ApiClient
from app.errors import AppError

logger = logging.getLogger(__name__)


class ResourceStore:
    def __init__(self, name: str, loader: Callable[..., Any]):
        self.name = name
        self.loader = loader
        self.data: Any = None
        self.params: Dict[str, Any] = {}
        self.loading = False
        self.error: Optional[AppError] = None
        self.stale = True
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def fetch(self, **params) -> Any:
        """
        Load the collection with the given query params.

        Returns:
            the freshest data held by the store; if this response was
            superseded while in flight it is dropped and the newer data
            (or None) is returned instead

        Raises:
            AppError: the load failed and was not superseded
        """
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.params = params
            self.loading = True
            self.error = None

        try:
            result = self.loader(**params)
        except AppError as e:
            with self._lock:
                if generation != self._generation:
                    logger.debug("[Store] %s: dropping failed stale fetch %d", self.name, generation)
                    return self.data
                self.loading = False
                self.error = e
            raise

        with self._lock:
            if generation != self._generation:
                logger.debug("[Store] %s: dropping stale response %d", self.name, generation)
                return self.data
            self.data = result
            self.loading = False
            self.stale = False
        return result

    def get(self, **params) -> Any:
        """Cached data if still valid for these params, else fetch."""
        if self.stale or params != self.params:
            return self.fetch(**params)
        return self.data

    def invalidate(self) -> None:
        """Mark stale and discard any response still in flight."""
        with self._lock:
            self._generation += 1
            self.stale = True
            self.loading = False

    def refresh(self) -> Any:
        return self.fetch(**self.params)


class ClientData:
    """
    The client's view of the backend: four stores plus the mutations,
    each of which invalidates only what it affects.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.meetings = ResourceStore("meetings", api.list_meetings)
        self.attendance = ResourceStore("attendance", api.list_attendance)
        self.minutes = ResourceStore("minutes", api.list_minutes)
        self.notifications = ResourceStore("notifications", api.list_notifications)

    def _invalidate(self, *stores: ResourceStore):
        for store in stores:
            store.invalidate()

    # Meetings
    def create_meeting(self, body):
        meeting = self.api.create_meeting(body)
        self._invalidate(self.meetings, self.notifications)
        return meeting

    def update_meeting(self, meeting_id, body):
        meeting = self.api.update_meeting(meeting_id, body)
        self._invalidate(self.meetings, self.notifications)
        return meeting

    def delete_meeting(self, meeting_id):
        self.api.delete_meeting(meeting_id)
        self._invalidate(self.meetings, self.notifications)

    # Attendance
    def record_attendance(self, body):
        record = self.api.record_attendance(body)
        self._invalidate(self.attendance)
        return record

    def update_attendance(self, attendance_id, body):
        record = self.api.update_attendance(attendance_id, body)
        self._invalidate(self.attendance)
        return record

    # Minutes
    def create_minutes(self, body):
        minutes = self.api.create_minutes(body)
        self._invalidate(self.minutes, self.notifications)
        return minutes

    def update_minutes(self, minutes_id, body):
        minutes = self.api.update_minutes(minutes_id, body)
        self._invalidate(self.minutes)
        return minutes

    def approve_minutes(self, minutes_id):
        minutes = self.api.approve_minutes(minutes_id)
        self._invalidate(self.minutes)
        return minutes

    def update_action_item(self, minutes_id, item_id, body):
        item = self.api.update_action_item(minutes_id, item_id, body)
        self._invalidate(self.minutes, self.notifications)
        return item

    # Notifications
    def mark_notification_read(self, notification_id):
        n = self.api.mark_notification_read(notification_id)
        self._invalidate(self.notifications)
        return n

    def mark_all_notifications_read(self):
        count = self.api.mark_all_notifications_read()
        self._invalidate(self.notifications)
        return count

    def delete_notification(self, notification_id):
        self.api.delete_notification(notification_id)
        self._invalidate(self.notifications)
