"""Entity storage with in-memory / SQLite swap.

Both adapters implement the ``Storage`` protocol. Absence is reported as
``None`` or an empty list, never as an exception.

Usage:
    from storage import create_storage
    storage = create_storage(app)          # called once in create_app()
    user = storage.create_user(UserDraft(...))
    storage.get_user_by_username("bob")   # case-insensitive
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Optional, Protocol

from conversations import build_conversations
from models import (
    Conversation,
    Guess,
    GuessDraft,
    Message,
    MessageDraft,
    User,
    UserDraft,
)

Clock = Callable[[], datetime]


def _ts(value: datetime) -> str:
    # Fixed width so text ordering in SQL matches time ordering
    return value.isoformat(timespec="microseconds")


# ── Protocol ───────────────────────────────────────────────

class Storage(Protocol):
    # Users
    def get_user(self, user_id: int) -> Optional[User]: ...
    def get_user_by_real_name(self, real_name: str) -> Optional[User]: ...
    def get_user_by_username(self, username: str) -> Optional[User]: ...
    def create_user(self, draft: UserDraft) -> User: ...
    def update_user_last_active(self, user_id: int) -> None: ...
    def get_all_users(self) -> list[User]: ...

    # Messages
    def create_message(self, draft: MessageDraft) -> Message: ...
    def get_messages_between_users(self, user_id1: int, user_id2: int) -> list[Message]: ...
    def get_unread_messages_count(self, user_id: int) -> int: ...
    def mark_messages_as_read(self, sender_id: int, receiver_id: int) -> None: ...

    # Guesses
    def create_guess(self, draft: GuessDraft) -> Guess: ...
    def get_guesses_for_user(self, user_id: int) -> list[Guess]: ...

    # Conversations
    def get_conversations_for_user(self, user_id: int) -> list[Conversation]: ...


# ── In-Memory Implementation ──────────────────────────────

class MemStorage:
    """Dict-backed storage. Ids start at 1 per entity type and are never reused."""

    def __init__(self, clock: Clock = datetime.now) -> None:
        self._clock = clock
        self._users: dict[int, User] = {}
        self._messages: dict[int, Message] = {}
        self._guesses: dict[int, Guess] = {}
        self._next_user_id = 1
        self._next_message_id = 1
        self._next_guess_id = 1
        self._lock = threading.Lock()

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_real_name(self, real_name: str) -> Optional[User]:
        wanted = real_name.lower()
        with self._lock:
            for user in self._users.values():
                if user.real_name.lower() == wanted:
                    return user
        return None

    def get_user_by_username(self, username: str) -> Optional[User]:
        wanted = username.lower()
        with self._lock:
            for user in self._users.values():
                if user.username.lower() == wanted:
                    return user
        return None

    def create_user(self, draft: UserDraft) -> User:
        with self._lock:
            user_id = self._next_user_id
            self._next_user_id += 1
            user = User(
                id=user_id,
                username=draft.username,
                password=draft.password,
                real_name=draft.real_name,
                fake_name=draft.fake_name,
                age=draft.age,
                school=draft.school,
                class_info=draft.class_info,
                avatar_type=draft.avatar_type,
                avatar_id=draft.avatar_id,
                last_active=self._clock(),
            )
            self._users[user_id] = user
        return user

    def update_user_last_active(self, user_id: int) -> None:
        with self._lock:
            user = self._users.get(user_id)
            if user is not None:
                user.last_active = self._clock()

    def get_all_users(self) -> list[User]:
        with self._lock:
            return list(self._users.values())

    # Messages

    def create_message(self, draft: MessageDraft) -> Message:
        with self._lock:
            message_id = self._next_message_id
            self._next_message_id += 1
            message = Message(
                id=message_id,
                sender_id=draft.sender_id,
                receiver_id=draft.receiver_id,
                content=draft.content,
                timestamp=self._clock(),
                read=draft.read,
            )
            self._messages[message_id] = message
        return message

    def get_messages_between_users(self, user_id1: int, user_id2: int) -> list[Message]:
        with self._lock:
            thread = [m for m in self._messages.values() if m.involves(user_id1, user_id2)]
        return sorted(thread, key=lambda m: m.timestamp)

    def get_unread_messages_count(self, user_id: int) -> int:
        with self._lock:
            return sum(
                1 for m in self._messages.values()
                if m.receiver_id == user_id and not m.read
            )

    def mark_messages_as_read(self, sender_id: int, receiver_id: int) -> None:
        with self._lock:
            for m in self._messages.values():
                if m.sender_id == sender_id and m.receiver_id == receiver_id and not m.read:
                    m.read = True

    # Guesses

    def create_guess(self, draft: GuessDraft) -> Guess:
        with self._lock:
            guess_id = self._next_guess_id
            self._next_guess_id += 1
            guess = Guess(
                id=guess_id,
                guesser_id=draft.guesser_id,
                target_id=draft.target_id,
                guessed_name=draft.guessed_name,
                correct=draft.correct,
                timestamp=self._clock(),
            )
            self._guesses[guess_id] = guess
        return guess

    def get_guesses_for_user(self, user_id: int) -> list[Guess]:
        with self._lock:
            found = [
                g for g in self._guesses.values()
                if g.guesser_id == user_id or g.target_id == user_id
            ]
        return sorted(found, key=lambda g: g.timestamp, reverse=True)

    # Conversations

    def get_conversations_for_user(self, user_id: int) -> list[Conversation]:
        with self._lock:
            snapshot = list(self._messages.values())
        return build_conversations(user_id, snapshot, self.get_user)


# ── SQLite Implementation ─────────────────────────────────

class SQLiteStorage:
    """Relational storage over the per-request connection from ``database.get_db``.

    Must be used inside a Flask app context.
    """

    def __init__(self, clock: Clock = datetime.now) -> None:
        self._clock = clock

    @staticmethod
    def _db():
        from database import get_db
        return get_db()

    @staticmethod
    def _user(row) -> User:
        return User(
            id=row["id"],
            username=row["username"],
            password=row["password"],
            real_name=row["real_name"],
            fake_name=row["fake_name"],
            age=row["age"],
            school=row["school"],
            class_info=row["class_info"],
            avatar_type=row["avatar_type"],
            avatar_id=row["avatar_id"],
            last_active=datetime.fromisoformat(row["last_active"]) if row["last_active"] else None,
        )

    @staticmethod
    def _message(row) -> Message:
        return Message(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row["content"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            read=bool(row["read"]),
        )

    @staticmethod
    def _guess(row) -> Guess:
        return Guess(
            id=row["id"],
            guesser_id=row["guesser_id"],
            target_id=row["target_id"],
            guessed_name=row["guessed_name"],
            correct=bool(row["correct"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
        )

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        row = self._db().execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._user(row) if row else None

    def get_user_by_real_name(self, real_name: str) -> Optional[User]:
        row = self._db().execute(
            "SELECT * FROM users WHERE py_lower(real_name) = ? ORDER BY id LIMIT 1",
            (real_name.lower(),),
        ).fetchone()
        return self._user(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        row = self._db().execute(
            "SELECT * FROM users WHERE py_lower(username) = ? ORDER BY id LIMIT 1",
            (username.lower(),),
        ).fetchone()
        return self._user(row) if row else None

    def create_user(self, draft: UserDraft) -> User:
        db = self._db()
        now = self._clock()
        cur = db.execute(
            "INSERT INTO users (username, password, real_name, fake_name, age, school, "
            "class_info, avatar_type, avatar_id, last_active) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (draft.username, draft.password, draft.real_name, draft.fake_name, draft.age,
             draft.school, draft.class_info, draft.avatar_type, draft.avatar_id,
             _ts(now)),
        )
        db.commit()
        return User(
            id=cur.lastrowid,
            username=draft.username,
            password=draft.password,
            real_name=draft.real_name,
            fake_name=draft.fake_name,
            age=draft.age,
            school=draft.school,
            class_info=draft.class_info,
            avatar_type=draft.avatar_type,
            avatar_id=draft.avatar_id,
            last_active=now,
        )

    def update_user_last_active(self, user_id: int) -> None:
        db = self._db()
        db.execute(
            "UPDATE users SET last_active = ? WHERE id = ?",
            (_ts(self._clock()), user_id),
        )
        db.commit()

    def get_all_users(self) -> list[User]:
        rows = self._db().execute("SELECT * FROM users ORDER BY id").fetchall()
        return [self._user(r) for r in rows]

    # Messages

    def create_message(self, draft: MessageDraft) -> Message:
        db = self._db()
        now = self._clock()
        cur = db.execute(
            "INSERT INTO messages (sender_id, receiver_id, content, timestamp, read) "
            "VALUES (?, ?, ?, ?, ?)",
            (draft.sender_id, draft.receiver_id, draft.content, _ts(now), int(draft.read)),
        )
        db.commit()
        return Message(
            id=cur.lastrowid,
            sender_id=draft.sender_id,
            receiver_id=draft.receiver_id,
            content=draft.content,
            timestamp=now,
            read=draft.read,
        )

    def get_messages_between_users(self, user_id1: int, user_id2: int) -> list[Message]:
        rows = self._db().execute(
            "SELECT * FROM messages "
            "WHERE (sender_id = ? AND receiver_id = ?) OR (sender_id = ? AND receiver_id = ?) "
            "ORDER BY timestamp ASC, id ASC",
            (user_id1, user_id2, user_id2, user_id1),
        ).fetchall()
        return [self._message(r) for r in rows]

    def get_unread_messages_count(self, user_id: int) -> int:
        row = self._db().execute(
            "SELECT COUNT(*) AS n FROM messages WHERE receiver_id = ? AND read = 0",
            (user_id,),
        ).fetchone()
        return row["n"]

    def mark_messages_as_read(self, sender_id: int, receiver_id: int) -> None:
        db = self._db()
        db.execute(
            "UPDATE messages SET read = 1 WHERE sender_id = ? AND receiver_id = ? AND read = 0",
            (sender_id, receiver_id),
        )
        db.commit()

    # Guesses

    def create_guess(self, draft: GuessDraft) -> Guess:
        db = self._db()
        now = self._clock()
        cur = db.execute(
            "INSERT INTO guesses (guesser_id, target_id, guessed_name, correct, timestamp) "
            "VALUES (?, ?, ?, ?, ?)",
            (draft.guesser_id, draft.target_id, draft.guessed_name, int(draft.correct),
             _ts(now)),
        )
        db.commit()
        return Guess(
            id=cur.lastrowid,
            guesser_id=draft.guesser_id,
            target_id=draft.target_id,
            guessed_name=draft.guessed_name,
            correct=draft.correct,
            timestamp=now,
        )

    def get_guesses_for_user(self, user_id: int) -> list[Guess]:
        rows = self._db().execute(
            "SELECT * FROM guesses WHERE guesser_id = ? OR target_id = ? "
            "ORDER BY timestamp DESC, id ASC",
            (user_id, user_id),
        ).fetchall()
        return [self._guess(r) for r in rows]

    # Conversations

    def get_conversations_for_user(self, user_id: int) -> list[Conversation]:
        rows = self._db().execute(
            "SELECT * FROM messages WHERE sender_id = ? OR receiver_id = ? ORDER BY id",
            (user_id, user_id),
        ).fetchall()
        return build_conversations(user_id, [self._message(r) for r in rows], self.get_user)


# ── Factory ───────────────────────────────────────────────

STORAGE_BACKENDS: dict[str, type] = {
    "memory": MemStorage,
    "sqlite": SQLiteStorage,
}


def create_storage(app) -> Storage:
    """Build the storage adapter named by STORAGE_BACKEND. Call once from create_app()."""
    backend = app.config.get("STORAGE_BACKEND", "memory")
    try:
        cls = STORAGE_BACKENDS[backend]
    except KeyError:
        raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}") from None

    if backend == "sqlite":
        import database
        database.init_app(app)

    storage = cls()
    app.logger.info("Storage backend: %s", backend)
    return storage
