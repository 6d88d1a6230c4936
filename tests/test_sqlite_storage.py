"""Tests for storage.SQLiteStorage — same contract as MemStorage, on SQLite."""

from __future__ import annotations

import pytest

from models import GuessDraft, MessageDraft


@pytest.fixture
def sqlite_app(tmp_path, clock):
    from app import create_app
    from storage import SQLiteStorage

    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
        "STORAGE_BACKEND": "sqlite",
        "DATABASE": str(tmp_path / "test.db"),
    })
    app.extensions["storage"] = SQLiteStorage(clock=clock)
    with app.app_context():
        yield app


@pytest.fixture
def db_storage(sqlite_app, make_draft):
    storage = sqlite_app.extensions["storage"]
    storage.create_user(make_draft("Bob", "Bob Jones", "Night Owl"))
    storage.create_user(make_draft("jane", "Jane Doe", "Moon Elf", avatar_type="fantasy"))
    storage.create_user(make_draft("carl", "Carl Berg", "Blue Whale"))
    return storage


def send(storage, sender_id, receiver_id, content="hi", **kw):
    return storage.create_message(MessageDraft(sender_id=sender_id, receiver_id=receiver_id,
                                               content=content, **kw))


class TestSQLiteUsers:
    def test_backend_selected_from_config(self, sqlite_app):
        from database import get_db
        tables = {r["name"] for r in get_db().execute(
            "SELECT name FROM sqlite_master WHERE type='table'").fetchall()}
        assert {"users", "messages", "guesses"} <= tables

    def test_create_and_get(self, db_storage):
        user = db_storage.get_user(2)
        assert user.username == "jane"
        assert user.avatar_type == "fantasy"
        assert user.last_active is not None
        assert db_storage.get_user(99) is None

    def test_lookups_case_insensitive(self, db_storage):
        assert db_storage.get_user_by_username("bob").id == 1
        assert db_storage.get_user_by_real_name("JANE DOE").id == 2
        assert db_storage.get_user_by_real_name("nobody") is None

    def test_real_name_lookup_folds_non_ascii(self, db_storage, make_draft):
        db_storage.create_user(make_draft("jose", "José Ñúñez", "Red Kite"))
        assert db_storage.get_user_by_real_name("JOSÉ ÑÚÑEZ").id == 4
        assert db_storage.get_user_by_real_name("josé ñúñez").id == 4

    def test_update_last_active(self, db_storage):
        before = db_storage.get_user(1).last_active
        db_storage.update_user_last_active(1)
        assert db_storage.get_user(1).last_active > before
        db_storage.update_user_last_active(404)

    def test_get_all_users(self, db_storage):
        assert [u.id for u in db_storage.get_all_users()] == [1, 2, 3]


class TestSQLiteMessages:
    def test_thread_ascending_both_directions(self, db_storage):
        m1 = send(db_storage, 1, 2, "one")
        send(db_storage, 1, 3, "other")
        m2 = send(db_storage, 2, 1, "two")
        thread = db_storage.get_messages_between_users(2, 1)
        assert [m.id for m in thread] == [m1.id, m2.id]
        assert all(m.read is False for m in thread)

    def test_unread_and_mark_read(self, db_storage):
        send(db_storage, 1, 2)
        send(db_storage, 1, 2)
        send(db_storage, 3, 2)
        assert db_storage.get_unread_messages_count(2) == 3

        db_storage.mark_messages_as_read(1, 2)
        assert db_storage.get_unread_messages_count(2) == 1
        db_storage.mark_messages_as_read(1, 2)
        assert db_storage.get_unread_messages_count(2) == 1

    def test_conversations(self, db_storage):
        send(db_storage, 3, 1, "from carl")
        send(db_storage, 1, 2, "to jane")
        send(db_storage, 2, 1, "from jane")
        convs = db_storage.get_conversations_for_user(1)
        assert [c.user_id for c in convs] == [2, 3]
        assert convs[0].last_message == "from jane"
        assert convs[0].unread_count == 1
        assert convs[1].unread_count == 1


class TestSQLiteGuesses:
    def test_guess_history_newest_first(self, db_storage):
        g1 = db_storage.create_guess(GuessDraft(1, 2, "Jane Doe", True))
        db_storage.create_guess(GuessDraft(2, 3, "x", False))
        g3 = db_storage.create_guess(GuessDraft(3, 1, "Bobby", False))
        history = db_storage.get_guesses_for_user(1)
        assert [g.id for g in history] == [g3.id, g1.id]
        assert history[1].correct is True
