import json
from types import SimpleNamespace

import httpx
import pytest

from app.client import cli
from app.client.api_client import ApiClient
from app.client.store import ClientData, ResourceStore
from app.errors import (
    AuthenticationError, ConflictError, ForbiddenError, NetworkError, NotFoundError, ServerError,
    ValidationFailed,
)

MEETING = {
    "id": "a" * 32,
    "title": "Design Review",
    "description": "Review the new design system",
    "date": "2030-05-01T10:00:00",
    "startTime": "10:00",
    "endTime": "11:00",
    "location": "Room 7",
    "organizer": {"id": "b" * 32, "name": "Alice", "email": "alice@example.com"},
    "attendees": [{"id": "c" * 32, "user": None, "name": "Guest", "email": "guest@example.com", "status": "invited"}],
    "status": "scheduled",
    "meetingType": "in-person",
    "priority": "medium",
    "tags": [],
    "attachments": [],
}

ATTENDANCE = {
    "id": "d" * 32,
    "meetingId": "a" * 32,
    "participant": {"name": "Guest", "email": "guest@example.com"},
    "status": "present",
    "checkInTime": "2030-05-01T10:02:00",
}


def _ok(data=None, status=200, message=None):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return httpx.Response(status, json=body)


def _page(key, items):
    return {key: items, "pagination": {"current": 1, "pages": 1 if items else 0, "total": len(items)}}


def fake_api(handler, token="tok"):
    return ApiClient(base_url="http://test/api", token=token, transport=httpx.MockTransport(handler))


def test_unwraps_envelope_and_sends_token():
    seen = {}

    def handler(request):
        seen["auth"] = request.headers.get("authorization")
        seen["params"] = dict(request.url.params)
        seen["path"] = request.url.path
        return _ok(_page("meetings", [MEETING]))

    api = fake_api(handler)
    meetings, pagination = api.list_meetings(page=1, search="design")
    assert meetings[0].title == "Design Review"
    assert meetings[0].start_time == "10:00"
    assert pagination.total == 1
    assert seen == {"auth": "Bearer tok", "params": {"page": "1", "search": "design"}, "path": "/api/meetings"}


def test_login_keeps_token():
    def handler(request):
        assert json.loads(request.content) == {"email": "a@example.com", "password": "Secret123"}
        user = {"id": "b" * 32, "name": "Alice", "email": "a@example.com", "role": "user",
                "createdAt": "2030-01-01T00:00:00"}
        return _ok({"token": "new-token", "user": user})

    api = fake_api(handler, token=None)
    user = api.login("a@example.com", "Secret123")
    assert user.name == "Alice"
    assert api.token == "new-token"


@pytest.mark.parametrize("status, exc", [
    (400, ValidationFailed),
    (401, AuthenticationError),
    (403, ForbiddenError),
    (404, NotFoundError),
    (409, ConflictError),
    (500, ServerError),
])
def test_error_envelopes_map_to_exceptions(status, exc):
    def handler(request):
        return httpx.Response(status, json={"success": False, "message": "nope"})

    with pytest.raises(exc) as info:
        fake_api(handler).get_meeting("a" * 32)
    assert info.value.message == "nope"
    assert info.value.status_code == status


def test_validation_errors_are_kept():
    errors = [{"field": "title", "message": "Title must be between 3 and 100 characters"}]

    def handler(request):
        return httpx.Response(400, json={"success": False, "message": "Validation failed", "errors": errors})

    with pytest.raises(ValidationFailed) as info:
        fake_api(handler).delete_meeting("a" * 32)
    assert info.value.errors == errors


def test_network_failure():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NetworkError):
        fake_api(handler).meeting_stats()


# =========================
# Stores
# =========================
def test_store_drops_superseded_response():
    calls = []

    def loader(**params):
        calls.append(params)
        if len(calls) == 1:
            # a newer fetch completes while this one is still in flight
            store.fetch(page=2)
            return "old"
        return "new"

    store = ResourceStore("meetings", loader)
    assert store.fetch(page=1) == "new"
    assert store.data == "new"
    assert store.params == {"page": 2}
    assert store.loading is False


def test_store_invalidate_discards_in_flight_response():
    def loader(**params):
        store.invalidate()
        return "stale"

    store = ResourceStore("meetings", loader)
    assert store.fetch() is None
    assert store.data is None
    assert store.stale is True


def test_store_keeps_error_state():
    def loader(**params):
        raise ForbiddenError()

    store = ResourceStore("meetings", loader)
    with pytest.raises(ForbiddenError):
        store.fetch()
    assert isinstance(store.error, ForbiddenError)
    assert store.loading is False


def test_store_get_uses_cache_until_invalidated():
    calls = []
    store = ResourceStore("meetings", lambda **p: calls.append(p) or len(calls))
    assert store.get(page=1) == 1
    assert store.get(page=1) == 1
    assert store.get(page=2) == 2
    store.invalidate()
    assert store.get(page=2) == 3


def test_mutations_invalidate_only_affected_stores():
    api = SimpleNamespace(
        list_meetings=lambda **p: "m", list_attendance=lambda **p: "a",
        list_minutes=lambda **p: "n", list_notifications=lambda **p: "x",
        record_attendance=lambda body: "record",
        create_meeting=lambda body: "meeting",
    )
    data = ClientData(api)
    for store in (data.meetings, data.attendance, data.minutes, data.notifications):
        store.fetch()

    data.record_attendance({})
    assert data.attendance.stale
    assert not any(s.stale for s in (data.meetings, data.minutes, data.notifications))

    data.create_meeting({})
    assert data.meetings.stale and data.notifications.stale
    assert not data.minutes.stale


# =========================
# CLI
# =========================
def _router(request):
    path = request.url.path
    if path == "/api/meetings":
        return _ok(_page("meetings", [MEETING]))
    if path == f"/api/meetings/{MEETING['id']}":
        return _ok(MEETING)
    if path == "/api/minutes":
        return _ok(_page("minutes", []))
    if path == "/api/attendance":
        return _ok(_page("attendance", [ATTENDANCE]))
    return httpx.Response(404, json={"success": False, "message": "Route not found"})


def test_cli_lists_meetings(capsys):
    code = cli.main(["meetings", "list"], api=fake_api(_router))
    assert code == 0
    out = capsys.readouterr().out
    assert "Design Review" in out
    assert "Page 1/1 (1 meetings)" in out


def test_cli_reports_typed_errors(capsys):
    code = cli.main(["minutes", "show", "e" * 32], api=fake_api(_router))
    assert code == 1
    assert "Error (404): Route not found" in capsys.readouterr().err


def test_cli_validates_before_sending(capsys):
    code = cli.main([
        "meetings", "create", "--title", "Hi", "--description", "Too short",
        "--date", "2030-05-01", "--start", "9:00", "--end", "10:00",
        "--location", "Room", "--attendee", "Bob <bob@example.com>",
    ], api=fake_api(_router))
    assert code == 2
    err = capsys.readouterr().err
    assert "title: Title must be between 3 and 100 characters" in err
    assert "description: Description must be between 10 and 500 characters" in err


def test_cli_export_writes_both_pdfs(tmp_path, capsys):
    code = cli.main(["minutes", "export", MEETING["id"], "--out", str(tmp_path)], api=fake_api(_router))
    assert code == 0
    names = sorted(p.name for p in tmp_path.iterdir())
    assert names == ["Attendance_Design_Review_2030-05-01.pdf", "Minutes_Design_Review_2030-05-01.pdf"]
    assert all(p.read_bytes().startswith(b"%PDF") for p in tmp_path.iterdir())


def test_parse_attendee():
    assert cli.parse_attendee("Jane Doe <jane@example.com>") == {"name": "Jane Doe", "email": "jane@example.com"}
    assert cli.parse_attendee("jane@example.com") == {"name": "jane", "email": "jane@example.com"}
