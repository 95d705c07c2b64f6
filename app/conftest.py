"""
Pytest configuration and fixtures.
The app runs against a private in-memory SQLite database per test.
"""
import os

os.environ.setdefault("PBKDF2_ITERATIONS", "1000")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASS"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db import Base, get_db, init_db
from app.main import app


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )

    # enforce foreign keys the way server databases do
    @event.listens_for(engine, "connect")
    def _foreign_keys_on(dbapi_conn, _record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    Session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user; returns (user, auth headers)."""

    def _register(name: str, email: str, password: str = "Secret123"):
        res = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        data = res.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _register


@pytest.fixture
def alice(register):
    return register("Alice Organizer", "alice@example.com")


@pytest.fixture
def bob(register):
    return register("Bob Attendee", "bob@example.com")


@pytest.fixture
def carol(register):
    return register("Carol Outsider", "carol@example.com")


@pytest.fixture
def meeting_payload():
    """Build a valid meeting body; attendees are (user or None, name, email)."""

    def _payload(*attendees, **overrides):
        body = {
            "title": "Quarterly Planning",
            "description": "Plan the next quarter's roadmap and budget",
            "date": "2030-05-01T10:00:00Z",
            "startTime": "10:00",
            "endTime": "11:30",
            "location": "Room 4",
            "attendees": [
                {"user": user["id"] if user else None, "name": name, "email": email}
                for user, name, email in attendees
            ] or [{"name": "Guest", "email": "guest@example.com"}],
            "tags": ["planning", "  q3 "],
        }
        body.update(overrides)
        return body

    return _payload


@pytest.fixture
def create_meeting(client, meeting_payload):
    def _create(headers, *attendees, **overrides):
        res = client.post("/api/meetings", json=meeting_payload(*attendees, **overrides), headers=headers)
        assert res.status_code == 201, res.text
        return res.json()["data"]

    return _create
