import pytest


@pytest.fixture
def meeting(alice, create_meeting):
    _, headers = alice
    return create_meeting(headers)


def _record(client, headers, meeting_id, email="bob@example.com", status="present", **extra):
    body = {
        "meeting": meeting_id,
        "participant": {"name": "Bob", "email": email},
        "status": status,
        **extra,
    }
    return client.post("/api/attendance", json=body, headers=headers)


def test_record_present_sets_check_in(client, alice, meeting):
    _, headers = alice
    res = _record(client, headers, meeting["id"])
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["checkInTime"] is not None
    assert data["meeting"]["title"] == meeting["title"]
    assert data["recordedBy"]["email"] == "alice@example.com"

    res = _record(client, headers, meeting["id"], email="dan@example.com", status="absent")
    assert res.json()["data"]["checkInTime"] is None


def test_duplicate_participant_conflicts(client, alice, meeting):
    _, headers = alice
    assert _record(client, headers, meeting["id"]).status_code == 201
    res = _record(client, headers, meeting["id"], email="Bob@Example.com", status="late")
    assert res.status_code == 409
    assert res.json()["message"] == "Attendance already recorded for this participant in this meeting"


def test_same_participant_in_another_meeting(client, alice, meeting, create_meeting):
    _, headers = alice
    other = create_meeting(headers, title="Another one")
    assert _record(client, headers, meeting["id"]).status_code == 201
    assert _record(client, headers, other["id"]).status_code == 201


def test_record_requires_existing_meeting(client, alice):
    _, headers = alice
    res = _record(client, headers, "a" * 32)
    assert res.status_code == 404
    assert res.json()["message"] == "Meeting not found"

    res = _record(client, headers, "not-an-id")
    assert res.status_code == 400
    assert res.json()["errors"][0] == {"field": "meeting", "message": "Valid meeting ID is required"}


def test_notes_limit(client, alice, meeting):
    _, headers = alice
    res = _record(client, headers, meeting["id"], notes="x" * 201)
    assert res.status_code == 400
    assert res.json()["errors"][0]["message"] == "Notes cannot exceed 200 characters"


def test_list_filtered_by_meeting(client, alice, meeting, create_meeting):
    _, headers = alice
    other = create_meeting(headers, title="Another one")
    for i in range(3):
        _record(client, headers, meeting["id"], email=f"p{i}@example.com")
    _record(client, headers, other["id"])

    data = client.get("/api/attendance", params={"meetingId": meeting["id"]}, headers=headers).json()["data"]
    assert data["pagination"]["total"] == 3
    assert {a["meetingId"] for a in data["attendance"]} == {meeting["id"]}

    data = client.get("/api/attendance", params={"limit": 2}, headers=headers).json()["data"]
    assert len(data["attendance"]) == 2
    assert data["pagination"] == {"current": 1, "pages": 2, "total": 4}


def test_update(client, alice, bob, meeting):
    _, alice_headers = alice
    _, bob_headers = bob
    record = _record(client, alice_headers, meeting["id"], status="absent").json()["data"]

    # no ownership restriction on updates
    res = client.put(
        f"/api/attendance/{record['id']}", json={"status": "excused", "notes": "Sick"}, headers=bob_headers
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["status"] == "excused"
    assert data["notes"] == "Sick"
    assert data["participant"]["email"] == "bob@example.com"

    res = client.put(f"/api/attendance/{'b' * 32}", json={"status": "late"}, headers=alice_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Attendance record not found"


def test_update_into_duplicate_conflicts(client, alice, meeting):
    _, headers = alice
    _record(client, headers, meeting["id"])
    other = _record(client, headers, meeting["id"], email="dan@example.com").json()["data"]
    res = client.put(
        f"/api/attendance/{other['id']}",
        json={"participant": {"name": "Bob", "email": "bob@example.com"}},
        headers=headers,
    )
    assert res.status_code == 409


def test_stats(client, alice, meeting):
    _, headers = alice
    _record(client, headers, meeting["id"], email="a@example.com", status="present")
    _record(client, headers, meeting["id"], email="b@example.com", status="present")
    _record(client, headers, meeting["id"], email="c@example.com", status="late")

    data = client.get("/api/attendance/stats", params={"meetingId": meeting["id"]}, headers=headers).json()["data"]
    assert data["totalRecords"] == 3
    assert data["byStatus"] == {"present": 2, "absent": 0, "late": 1, "excused": 0}
    assert data["stats"] == [{"status": "present", "count": 2}, {"status": "late", "count": 1}]
