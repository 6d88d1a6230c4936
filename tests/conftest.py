"""
Test fixtures for Alias Chat.

Provides app, client, auth_client and storage fixtures backed by an
in-memory store with a deterministic clock.
"""

from __future__ import annotations

import pytest
from datetime import datetime, timedelta

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

PASSWORD = "password123"


class FakeClock:
    """Returns a strictly increasing time, one second per call."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def make_user_draft(username: str, real_name: str, fake_name: str, password_hash: str = "x", **overrides):
    from models import UserDraft
    fields = dict(
        username=username,
        password=password_hash,
        real_name=real_name,
        fake_name=fake_name,
        age=16,
        school="Maria Lyceum",
        class_info="5B",
        avatar_type="animal",
        avatar_id="fox",
    )
    fields.update(overrides)
    return UserDraft(**fields)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mem_storage(clock):
    """Bare in-memory store, no Flask app."""
    from storage import MemStorage
    return MemStorage(clock=clock)


@pytest.fixture
def app(clock):
    """Create app with a fresh in-memory store and three seeded users."""
    from app import create_app
    from storage import MemStorage
    from werkzeug.security import generate_password_hash

    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "STORAGE_BACKEND": "memory",
    })
    storage = MemStorage(clock=clock)
    app.extensions["storage"] = storage

    pw = generate_password_hash(PASSWORD)
    storage.create_user(make_user_draft("alice", "Alice Smith", "Silver Fox", pw))
    storage.create_user(make_user_draft("bob", "Bob Jones", "Night Owl", pw,
                                        avatar_type="fantasy", avatar_id="dragon"))
    storage.create_user(make_user_draft("carol", "Carol White", "Red Panda", pw))
    yield app


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


def login(client, username: str, password: str = PASSWORD):
    return client.post("/api/login", json={"username": username, "password": password})


@pytest.fixture
def auth_client(app):
    """Authenticated test client (logged in as alice, user 1)."""
    client = app.test_client()
    resp = login(client, "alice")
    assert resp.status_code == 200
    return client


@pytest.fixture
def bob_client(app):
    """Second authenticated client (logged in as bob, user 2)."""
    client = app.test_client()
    resp = login(client, "bob")
    assert resp.status_code == 200
    return client


@pytest.fixture
def make_draft():
    """Factory for UserDraft objects."""
    return make_user_draft
