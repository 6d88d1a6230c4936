"""
Shared helpers used across blueprints.

Extracted from app.py to break circular dependencies.
"""

from __future__ import annotations

from flask import current_app, jsonify
from flask_login import current_user
from pydantic import ValidationError

from schemas import field_errors
from storage import Storage


def get_storage() -> Storage:
    """Return the storage adapter built by create_app()."""
    return current_app.extensions["storage"]


def current_user_id() -> int:
    """Return the authenticated user's ID. Only valid behind @login_required."""
    return current_user.id


def error_response(message: str, status: int):
    return jsonify({"message": message}), status


def validation_error_response(exc: ValidationError):
    """400 with per-field errors."""
    return jsonify({"message": "Invalid data", "errors": field_errors(exc)}), 400
