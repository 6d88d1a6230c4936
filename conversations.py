"""Conversation list aggregation.

Builds one summary per counterpart from a snapshot of messages. Shared by
every storage adapter so ordering and unread rules stay identical.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Optional

from models import Conversation, Message, User


def counterpart_ids(user_id: int, messages: Iterable[Message]) -> list[int]:
    """Distinct users who exchanged at least one message with ``user_id``, in encounter order."""
    seen: dict[int, None] = {}
    for m in messages:
        if m.sender_id == user_id:
            seen.setdefault(m.receiver_id, None)
        elif m.receiver_id == user_id:
            seen.setdefault(m.sender_id, None)
    return list(seen)


def build_conversations(
    user_id: int,
    messages: Iterable[Message],
    get_user: Callable[[int], Optional[User]],
) -> list[Conversation]:
    """Summarise every thread ``user_id`` takes part in, most recent first.

    Counterparts whose user record is gone are skipped. Threads with equal
    last-message times keep encounter order.
    """
    messages = list(messages)
    conversations: list[Conversation] = []

    for other_id in counterpart_ids(user_id, messages):
        other = get_user(other_id)
        if other is None:
            continue

        thread = sorted(
            (m for m in messages if m.involves(user_id, other_id)),
            key=lambda m: m.timestamp,
            reverse=True,
        )
        last = thread[0] if thread else None
        unread = sum(
            1 for m in thread
            if m.sender_id == other_id and m.receiver_id == user_id and not m.read
        )

        conversations.append(Conversation(
            user_id=other.id,
            fake_name=other.fake_name,
            avatar_type=other.avatar_type,
            avatar_id=other.avatar_id,
            last_message=last.content if last else None,
            last_message_time=last.timestamp if last else None,
            unread_count=unread,
        ))

    return sort_conversations(conversations)


def sort_conversations(conversations: list[Conversation]) -> list[Conversation]:
    """Newest ``last_message_time`` first; entries without one go last."""
    with_time = [c for c in conversations if c.last_message_time is not None]
    without_time = [c for c in conversations if c.last_message_time is None]
    with_time.sort(key=_last_time, reverse=True)
    return with_time + without_time


def _last_time(c: Conversation) -> datetime:
    return c.last_message_time  # type: ignore[return-value]
