"""
SQLite database layer for Alias Chat.

Uses raw sqlite3 with WAL mode and parameterized queries. Only used when
STORAGE_BACKEND is "sqlite"; the default backend keeps everything in memory.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from flask import current_app, g

DEFAULT_DATABASE = str(Path(__file__).parent / "alias_chat.db")


SCHEMA = """
-- Users
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT NOT NULL UNIQUE COLLATE NOCASE,
    password TEXT NOT NULL,
    real_name TEXT NOT NULL,
    fake_name TEXT NOT NULL,
    age INTEGER NOT NULL,
    school TEXT NOT NULL,
    class_info TEXT NOT NULL,
    avatar_type TEXT NOT NULL CHECK (avatar_type IN ('animal', 'fantasy')),
    avatar_id TEXT NOT NULL,
    last_active TEXT
);

-- Direct messages
CREATE TABLE IF NOT EXISTS messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sender_id INTEGER NOT NULL REFERENCES users(id),
    receiver_id INTEGER NOT NULL REFERENCES users(id),
    content TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    read INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_messages_pair ON messages(sender_id, receiver_id);
CREATE INDEX IF NOT EXISTS idx_messages_receiver_read ON messages(receiver_id, read);

-- Identity guesses
CREATE TABLE IF NOT EXISTS guesses (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    guesser_id INTEGER NOT NULL REFERENCES users(id),
    target_id INTEGER NOT NULL REFERENCES users(id),
    guessed_name TEXT NOT NULL,
    correct INTEGER NOT NULL,
    timestamp TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_guesses_guesser ON guesses(guesser_id);
CREATE INDEX IF NOT EXISTS idx_guesses_target ON guesses(target_id);
"""


def get_db() -> sqlite3.Connection:
    """Return a DB connection from Flask g, creating if needed."""
    if "db" not in g:
        db_path = current_app.config.get("DATABASE", DEFAULT_DATABASE)
        g.db = sqlite3.connect(db_path)
        g.db.row_factory = sqlite3.Row
        # py_lower folds case exactly like str.lower() in MemStorage
        g.db.create_function("py_lower", 1, str.lower, deterministic=True)
        g.db.execute("PRAGMA journal_mode=WAL")
    return g.db


def close_db(e=None) -> None:
    """Teardown handler — close DB connection."""
    db = g.pop("db", None)
    if db is not None:
        db.close()


def init_db() -> None:
    """Execute schema DDL to create all tables."""
    db = get_db()
    db.executescript(SCHEMA)
    db.commit()


def init_app(app) -> None:
    """Register teardown and create the schema once."""
    app.teardown_appcontext(close_db)
    with app.app_context():
        init_db()
