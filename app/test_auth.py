from app.services.auth_service import hash_password, issue_token, verify_password


def test_register_returns_token_and_user(client):
    res = client.post(
        "/api/auth/register",
        json={"name": "Dana", "email": "Dana@Example.com", "password": "Secret123"},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["data"]["token"]
    assert body["data"]["user"]["email"] == "dana@example.com"
    assert body["data"]["user"]["role"] == "user"
    assert "passwordHash" not in body["data"]["user"]


def test_register_duplicate_email_conflicts(client, alice):
    res = client.post(
        "/api/auth/register",
        json={"name": "Other", "email": "alice@example.com", "password": "Secret123"},
    )
    assert res.status_code == 409
    assert res.json() == {"success": False, "message": "User already exists with this email"}


def test_register_validation_errors(client):
    res = client.post("/api/auth/register", json={"name": "D", "email": "nope", "password": "short"})
    assert res.status_code == 400
    body = res.json()
    assert body["message"] == "Validation failed"
    fields = {e["field"]: e["message"] for e in body["errors"]}
    assert fields["name"] == "Name must be between 2 and 50 characters"
    assert fields["email"] == "Please provide a valid email"
    assert fields["password"] == "Password must be at least 6 characters long"


def test_password_needs_mixed_case_and_digit(client):
    res = client.post("/api/auth/register", json={"name": "Dana", "email": "d@example.com", "password": "alllower1"})
    assert res.status_code == 400
    assert "uppercase" in res.json()["errors"][0]["message"]


def test_login(client, alice):
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Secret123"})
    assert res.status_code == 200
    assert res.json()["data"]["user"]["name"] == "Alice Organizer"

    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Wrong123"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid email or password"


def test_profile_requires_valid_token(client, alice):
    assert client.get("/api/auth/profile").status_code == 401

    _, headers = alice
    token = headers["Authorization"].split(" ", 1)[1]
    tampered = token[:-1] + ("1" if token[-1] == "0" else "0")
    res = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {tampered}"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid token"

    res = client.get("/api/auth/profile", headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["user"]["email"] == "alice@example.com"


def test_expired_token_rejected(client, alice):
    user, _ = alice
    token = issue_token(user["id"], ttl_hours=-1)
    res = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["message"] == "Token expired"


def test_token_for_unknown_user_rejected(client):
    token = issue_token("0" * 32)
    res = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_update_profile_email_conflict(client, alice, bob):
    _, headers = alice
    res = client.put("/api/auth/profile", json={"email": "bob@example.com"}, headers=headers)
    assert res.status_code == 409

    res = client.put("/api/auth/profile", json={"name": "Alice A."}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["user"]["name"] == "Alice A."


def test_change_password(client, alice):
    _, headers = alice
    res = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "Wrong123", "newPassword": "Newpass123"},
        headers=headers,
    )
    assert res.status_code == 400
    assert res.json()["message"] == "Current password is incorrect"

    res = client.put(
        "/api/auth/change-password",
        json={"currentPassword": "Secret123", "newPassword": "Newpass123"},
        headers=headers,
    )
    assert res.status_code == 200
    res = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "Newpass123"})
    assert res.status_code == 200


def test_password_hashing():
    stored = hash_password("Secret123")
    assert stored.startswith("pbkdf2_sha256$")
    assert verify_password("Secret123", stored)
    assert not verify_password("Secret124", stored)
    assert not verify_password("Secret123", "garbage")
