"""Message content filter.

Masks blocked words and contact details before a message is stored, so
aliases can't be bypassed by sharing a phone number or address.
"""

from __future__ import annotations

import re

BLOCKED_WORDS: list[str] = [
    "damn",
    "hell",
    "crap",
    "shit",
    "fuck",
    "bitch",
    "bastard",
    "asshole",
    "dick",
    "idiot",
    "stupid",
    "loser",
]

# Whole words only, plus common suffixes ("fucking", "idiots").
BLOCKED_RE = re.compile(
    r"\b(" + "|".join(re.escape(w) for w in BLOCKED_WORDS) + r")(s|es|ed|er|ing)?\b",
    re.IGNORECASE,
)

EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")

# Digit runs that may be phone numbers; _is_phone decides.
PHONE_CANDIDATE_RE = re.compile(r"(?<!\w)\+?\d[\d\s().-]{6,}\d(?!\w)")
DATE_RE = re.compile(r"\d{4}-\d{1,2}-\d{1,2}|\d{1,2}[./-]\d{1,2}[./-]\d{2,4}")
MIN_PHONE_DIGITS = 9

MASK = "*"
CONTACT_PLACEHOLDER = "[hidden]"


def _mask(match: re.Match) -> str:
    return MASK * len(match.group(0))


def _is_phone(candidate: str) -> bool:
    if DATE_RE.search(candidate):
        return False
    return sum(c.isdigit() for c in candidate) >= MIN_PHONE_DIGITS


def _hide_phone(match: re.Match) -> str:
    return CONTACT_PLACEHOLDER if _is_phone(match.group(0)) else match.group(0)


def sanitize(text: str) -> str:
    """Return ``text`` with blocked words starred out and contact details hidden."""
    if not text:
        return text
    text = EMAIL_RE.sub(CONTACT_PLACEHOLDER, text)
    text = PHONE_CANDIDATE_RE.sub(_hide_phone, text)
    return BLOCKED_RE.sub(_mask, text)


def contains_blocked_word(text: str) -> bool:
    return bool(text) and BLOCKED_RE.search(text) is not None
