"""User directory and conversation list routes."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from flask_login import login_required

from helpers import current_user_id, error_response, get_storage

logger = logging.getLogger(__name__)

bp = Blueprint("core", __name__)


@bp.route("/api/users")
@login_required
def api_list_users():
    """Everyone except the caller, public profile fields only."""
    uid = current_user_id()
    try:
        users = [
            u.public_profile()
            for u in get_storage().get_all_users()
            if u.id != uid
        ]
        return jsonify(users), 200
    except Exception as exc:
        logger.exception("api_list_users failed for user %s: %s", uid, exc)
        return error_response("Failed to get users", 500)


@bp.route("/api/conversations")
@login_required
def api_list_conversations():
    uid = current_user_id()
    try:
        conversations = get_storage().get_conversations_for_user(uid)
        return jsonify([c.to_dict() for c in conversations]), 200
    except Exception as exc:
        logger.exception("api_list_conversations failed for user %s: %s", uid, exc)
        return error_response("Failed to get conversations", 500)
