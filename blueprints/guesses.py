"""Identity guessing routes."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required
from pydantic import ValidationError

from guessing import make_guess
from helpers import current_user_id, error_response, get_storage, validation_error_response
from schemas import GuessRequest

logger = logging.getLogger(__name__)

bp = Blueprint("guesses", __name__)


@bp.route("/api/guess", methods=["POST"])
@login_required
def api_make_guess():
    """Record a guess at another user's real name.

    The real name is only included in the response when the guess is right.
    """
    uid = current_user_id()
    try:
        body = GuessRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    try:
        storage = get_storage()
        target = storage.get_user(body.target_id)
        if target is None:
            return error_response("Target user not found", 404)

        guess = storage.create_guess(make_guess(uid, target, body.guessed_name))
        logger.info("guess %s by user %s on user %s correct=%s",
                    guess.id, uid, target.id, guess.correct)

        data = guess.to_dict()
        if guess.correct:
            data["targetRealName"] = target.real_name
        return jsonify(data), 201
    except Exception as exc:
        logger.exception("api_make_guess failed for user %s: %s", uid, exc)
        return error_response("Failed to submit guess", 500)


@bp.route("/api/guesses")
@login_required
def api_list_guesses():
    """Guesses the caller made or received, newest first."""
    uid = current_user_id()
    try:
        guesses = get_storage().get_guesses_for_user(uid)
        return jsonify([g.to_dict() for g in guesses]), 200
    except Exception as exc:
        logger.exception("api_list_guesses failed for user %s: %s", uid, exc)
        return error_response("Failed to get guesses", 500)
