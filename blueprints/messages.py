"""Direct message routes: threads, sending, unread count."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_login import login_required
from pydantic import ValidationError

from filters import sanitize
from helpers import current_user_id, error_response, get_storage, validation_error_response
from models import MessageDraft
from schemas import SendMessageRequest

logger = logging.getLogger(__name__)

bp = Blueprint("messages", __name__)


@bp.route("/api/messages/unread/count")
@login_required
def api_unread_count():
    uid = current_user_id()
    try:
        count = get_storage().get_unread_messages_count(uid)
        return jsonify({"count": count}), 200
    except Exception as exc:
        logger.exception("api_unread_count failed for user %s: %s", uid, exc)
        return error_response("Failed to get unread count", 500)


@bp.route("/api/messages/<user_id>")
@login_required
def api_get_thread(user_id):
    """Return the thread with ``user_id`` and mark their messages to us as read.

    The response shows read flags as they were before this call.
    """
    uid = current_user_id()
    try:
        other_id = int(user_id)
    except ValueError:
        return error_response("Invalid user ID", 400)

    try:
        storage = get_storage()
        thread = [m.to_dict() for m in storage.get_messages_between_users(uid, other_id)]
        storage.mark_messages_as_read(other_id, uid)
        return jsonify(thread), 200
    except Exception as exc:
        logger.exception("api_get_thread failed for user %s: %s", uid, exc)
        return error_response("Failed to get messages", 500)


@bp.route("/api/messages", methods=["POST"])
@login_required
def api_send_message():
    uid = current_user_id()
    try:
        body = SendMessageRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    try:
        storage = get_storage()
        if storage.get_user(body.receiver_id) is None:
            return jsonify({
                "message": "Invalid data",
                "errors": [{"field": "receiverId", "message": "Receiver not found"}],
            }), 400
        message = storage.create_message(MessageDraft(
            sender_id=uid,
            receiver_id=body.receiver_id,
            content=sanitize(body.content),
            read=False,
        ))
        logger.info("message %s sent by user %s to user %s", message.id, uid, body.receiver_id)
        return jsonify(message.to_dict()), 201
    except Exception as exc:
        logger.exception("api_send_message failed for user %s: %s", uid, exc)
        return error_response("Failed to send message", 500)
