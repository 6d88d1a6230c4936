"""Identity guessing rules."""

from __future__ import annotations

from models import GuessDraft, User


def is_correct_guess(target: User, guessed_name: str) -> bool:
    """Case-insensitive exact match against the target's real name."""
    return target.real_name.lower() == guessed_name.lower()


def make_guess(guesser_id: int, target: User, guessed_name: str) -> GuessDraft:
    """Build a guess draft with correctness already decided from ``target``."""
    return GuessDraft(
        guesser_id=guesser_id,
        target_id=target.id,
        guessed_name=guessed_name,
        correct=is_correct_guess(target, guessed_name),
    )
