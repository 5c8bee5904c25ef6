"""Pytest fixtures: per-test SQLite database, recording notifier, session helpers."""
import os
import uuid
from datetime import timedelta

# Keep the application's own engine off disk; tests bind their own engine below.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from waternearme.config import Settings, get_settings
from waternearme.database import Base, enable_sqlite_foreign_keys, get_db, utcnow
from waternearme.main import app
from waternearme.services.notifier import Notifier, get_notifier

# Import all models so they register with Base.metadata
from waternearme.models.user import User                      # noqa: F401
from waternearme.models.auth_session import AuthSession       # noqa: F401
from waternearme.models.bubbler import Bubbler                # noqa: F401
from waternearme.models.audit_log import BubblerAuditLog      # noqa: F401
from waternearme.models.review import Review                  # noqa: F401
from waternearme.models.favorite import Favorite              # noqa: F401
from waternearme.models.xp_event import XpEvent               # noqa: F401

TEST_API_KEY = "test-api-key"
SESSION_COOKIE = "next-auth.session-token"
API_HEADERS = {"x-api-key": TEST_API_KEY}
# Pre-seeded account credited by API-key creates that do not name another user.
CONTRIBUTOR_ID = "u1"


class RecordingNotifier(Notifier):
    """Collects messages instead of posting them."""

    def __init__(self):
        self.messages = []

    def send(self, message):
        self.messages.append(message)

    @property
    def titles(self) -> list[str]:
        return [m.embeds[0].title for m in self.messages]


class FailingNotifier(Notifier):
    """Simulates an unreachable webhook."""

    def send(self, message):
        raise httpx.ConnectError("webhook unreachable")


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite database file for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    with sessionmaker(bind=engine)() as session:
        session.add(User(id=CONTRIBUTOR_ID, name="Mapper", username="mapper", email="mapper@example.com"))
        session.commit()
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for direct assertions."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_settings():
    return Settings(API_KEY=TEST_API_KEY, SESSION_COOKIE_NAME=SESSION_COOKIE, DISCORD_WEBHOOK_URL="")


@pytest.fixture(scope="function")
def notifier():
    return RecordingNotifier()


@pytest.fixture(scope="function")
def client(db_engine, test_settings, notifier):
    """TestClient with database, settings and notifier dependencies overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_user(db, username: str | None = "alice", email: str | None = None) -> dict:
    """Insert a user with a live session. Pass username=None for a user still onboarding."""
    user = User(
        id=str(uuid.uuid4()),
        name=(username or "new user").title(),
        username=username,
        email=email or f"{username or uuid.uuid4().hex[:8]}@example.com",
    )
    token = uuid.uuid4().hex
    db.add(user)
    db.add(AuthSession(session_token=token, user_id=user.id, expires=utcnow() + timedelta(days=30)))
    db.commit()
    return {"id": user.id, "username": username, "token": token, "headers": session_headers(token)}


def session_headers(token: str) -> dict:
    return {"Cookie": f"{SESSION_COOKIE}={token}"}


PARK_FOUNTAIN = {
    "name": "Park Fountain",
    "latitude": -27.47,
    "longitude": 153.02,
    "type": "fountain",
}


def create_test_bubbler(client, headers: dict | None = None, **overrides) -> dict:
    """Helper: POST /api/waypoints and return response JSON."""
    body = {**PARK_FOUNTAIN, **overrides}
    if headers is None:
        headers = API_HEADERS
        body.setdefault("addedbyuserid", CONTRIBUTOR_ID)
    resp = client.post("/api/waypoints", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()
