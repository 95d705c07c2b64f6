from app.entities import User


def _create(client, headers, **body):
    payload = {"title": "Heads up", "message": "Something happened", **body}
    return client.post("/api/notifications", json=payload, headers=headers)


def _list(client, headers, **params):
    res = client.get("/api/notifications", params=params, headers=headers)
    assert res.status_code == 200
    return res.json()["data"]


def test_create_for_self_and_list(client, alice):
    _, headers = alice
    res = _create(client, headers)
    assert res.status_code == 201
    created = res.json()["data"]
    assert created["type"] == "general"
    assert created["isRead"] is False

    data = _list(client, headers)
    assert [n["id"] for n in data["notifications"]] == [created["id"]]
    assert data["unreadCount"] == 1
    assert data["pagination"]["total"] == 1


def test_non_admin_cannot_target_others(client, alice, bob):
    _, alice_headers = alice
    bob_user, _ = bob
    res = _create(client, alice_headers, recipient=bob_user["id"])
    assert res.status_code == 403


def test_admin_can_target_others(client, db_session, alice, bob):
    alice_user, alice_headers = alice
    bob_user, bob_headers = bob
    db_session.get(User, alice_user["id"]).role = "admin"
    db_session.commit()

    assert _create(client, alice_headers, recipient=bob_user["id"]).status_code == 201
    assert _list(client, bob_headers)["unreadCount"] == 1
    assert _create(client, alice_headers, recipient="9" * 32).status_code == 404


def test_mark_read_and_filter(client, alice):
    _, headers = alice
    first = _create(client, headers, title="One").json()["data"]
    _create(client, headers, title="Two")

    res = client.put(f"/api/notifications/{first['id']}/read", headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["isRead"] is True

    unread = _list(client, headers, isRead="false")
    assert [n["title"] for n in unread["notifications"]] == ["Two"]
    assert unread["unreadCount"] == 1
    assert [n["title"] for n in _list(client, headers, isRead="true")["notifications"]] == ["One"]


def test_read_all(client, alice):
    _, headers = alice
    for i in range(3):
        _create(client, headers, title=f"N{i}")
    res = client.put("/api/notifications/read-all", headers=headers)
    assert res.status_code == 200
    assert res.json()["data"] == {"updated": 3}
    assert _list(client, headers)["unreadCount"] == 0


def test_other_users_notification_is_not_found(client, alice, bob):
    _, alice_headers = alice
    _, bob_headers = bob
    note = _create(client, alice_headers).json()["data"]

    assert client.put(f"/api/notifications/{note['id']}/read", headers=bob_headers).status_code == 404
    res = client.delete(f"/api/notifications/{note['id']}", headers=bob_headers)
    assert res.status_code == 404
    assert res.json()["message"] == "Notification not found"


def test_delete(client, alice):
    _, headers = alice
    note = _create(client, headers).json()["data"]
    assert client.delete(f"/api/notifications/{note['id']}", headers=headers).status_code == 200
    assert _list(client, headers)["notifications"] == []


def test_validation(client, alice):
    _, headers = alice
    res = _create(client, headers, title="", type="bogus")
    assert res.status_code == 400
    fields = {e["field"] for e in res.json()["errors"]}
    assert fields == {"title", "type"}
