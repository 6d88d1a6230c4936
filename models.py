"""
Entity dataclasses for Alias Chat.

Users, messages and guesses are plain dataclasses owned by a storage
adapter. ``to_dict()`` renders the camelCase JSON shape the web client
expects.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

AVATAR_TYPES = ("animal", "fantasy")


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ── Drafts (insert payloads) ──────────────────────────────


@dataclass
class UserDraft:
    username: str
    password: str  # already hashed
    real_name: str
    fake_name: str
    age: int
    school: str
    class_info: str
    avatar_type: str  # "animal" or "fantasy"
    avatar_id: str


@dataclass
class MessageDraft:
    sender_id: int
    receiver_id: int
    content: str
    read: bool = False


@dataclass
class GuessDraft:
    guesser_id: int
    target_id: int
    guessed_name: str
    correct: bool


# ── Stored entities ───────────────────────────────────────


@dataclass
class User:
    id: int
    username: str
    password: str
    real_name: str
    fake_name: str
    age: int
    school: str
    class_info: str
    avatar_type: str
    avatar_id: str
    last_active: Optional[datetime] = None

    def public_profile(self) -> dict:
        """The subset other users are allowed to see."""
        return {
            "id": self.id,
            "fakeName": self.fake_name,
            "avatarType": self.avatar_type,
            "avatarId": self.avatar_id,
            "lastActive": _iso(self.last_active),
        }

    def to_dict(self) -> dict:
        """Self view for the logged-in user. Never includes the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "realName": self.real_name,
            "fakeName": self.fake_name,
            "age": self.age,
            "school": self.school,
            "classInfo": self.class_info,
            "avatarType": self.avatar_type,
            "avatarId": self.avatar_id,
            "lastActive": _iso(self.last_active),
        }


@dataclass
class Message:
    id: int
    sender_id: int
    receiver_id: int
    content: str
    timestamp: datetime
    read: bool = False

    def involves(self, user_a: int, user_b: int) -> bool:
        """True if the message was exchanged between the two users, either way."""
        return (
            (self.sender_id == user_a and self.receiver_id == user_b)
            or (self.sender_id == user_b and self.receiver_id == user_a)
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "senderId": self.sender_id,
            "receiverId": self.receiver_id,
            "content": self.content,
            "timestamp": _iso(self.timestamp),
            "read": self.read,
        }


@dataclass
class Guess:
    id: int
    guesser_id: int
    target_id: int
    guessed_name: str
    correct: bool
    timestamp: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "guesserId": self.guesser_id,
            "targetId": self.target_id,
            "guessedName": self.guessed_name,
            "correct": self.correct,
            "timestamp": _iso(self.timestamp),
        }


@dataclass
class Conversation:
    """Per-counterpart summary derived from the message set. Never stored."""
    user_id: int
    fake_name: str
    avatar_type: str
    avatar_id: str
    last_message: Optional[str] = None
    last_message_time: Optional[datetime] = None
    unread_count: int = 0

    def to_dict(self) -> dict:
        data = {
            "userId": self.user_id,
            "fakeName": self.fake_name,
            "avatarType": self.avatar_type,
            "avatarId": self.avatar_id,
            "unreadCount": self.unread_count,
        }
        if self.last_message is not None:
            data["lastMessage"] = self.last_message
        if self.last_message_time is not None:
            data["lastMessageTime"] = _iso(self.last_message_time)
        return data

