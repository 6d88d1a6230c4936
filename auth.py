"""
User Authentication — Flask-Login blueprint.

Provides register, login, logout and current-user JSON routes.
Uses werkzeug.security for password hashing.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request
from flask_login import LoginManager, UserMixin, current_user, login_required, login_user, logout_user
from pydantic import ValidationError
from werkzeug.security import check_password_hash, generate_password_hash

from audit import log_event
from extensions import limiter
from helpers import error_response, get_storage, validation_error_response
from models import UserDraft
from schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)
login_manager = LoginManager()


class SessionUser(UserMixin):
    """Wraps a stored user for Flask-Login. Only the id lives in the session."""

    def __init__(self, id: int, username: str):
        self.id = id
        self.username = username

    @staticmethod
    def get(user_id: int):
        user = get_storage().get_user(user_id)
        if user:
            return SessionUser(user.id, user.username)
        return None


@login_manager.user_loader
def load_user(user_id):
    try:
        return SessionUser.get(int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return error_response("Unauthorized", 401)


@auth_bp.route("/api/register", methods=["POST"])
@limiter.limit("10 per hour")
def register():
    try:
        body = RegisterRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    storage = get_storage()
    try:
        if storage.get_user_by_username(body.username):
            return error_response("Username already exists", 400)

        user = storage.create_user(UserDraft(
            username=body.username,
            password=generate_password_hash(body.password),
            real_name=body.real_name,
            fake_name=body.fake_name,
            age=body.age,
            school=body.school,
            class_info=body.class_info,
            avatar_type=body.avatar_type,
            avatar_id=body.avatar_id,
        ))
    except Exception as exc:
        logger.exception("register failed: %s", exc)
        return error_response("Failed to register", 500)

    log_event("register", user.id, f"username={user.username}")
    login_user(SessionUser(user.id, user.username), remember=True)
    return jsonify(user.to_dict()), 201


@auth_bp.route("/api/login", methods=["POST"])
@limiter.limit("5 per 15 minutes")
def login():
    try:
        body = LoginRequest.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    storage = get_storage()
    user = storage.get_user_by_username(body.username)
    if not user or not check_password_hash(user.password, body.password):
        log_event("login_failed", user.id if user else None, f"username={body.username}")
        return error_response("Invalid username or password", 401)

    storage.update_user_last_active(user.id)
    login_user(SessionUser(user.id, user.username), remember=True)
    log_event("login_success", user.id)
    return jsonify(storage.get_user(user.id).to_dict()), 200


@auth_bp.route("/api/logout", methods=["POST"])
def logout():
    uid = current_user.id if current_user.is_authenticated else None
    logout_user()
    log_event("logout", uid)
    return jsonify({"success": True}), 200


@auth_bp.route("/api/user")
@login_required
def me():
    user = get_storage().get_user(current_user.id)
    if user is None:
        return error_response("Unauthorized", 401)
    return jsonify(user.to_dict()), 200
