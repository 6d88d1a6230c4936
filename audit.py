"""
Audit logging — records account and security events.

Events go to a dedicated logger so they can be routed separately from
access logs.
"""

from __future__ import annotations

import logging

from flask import g, has_request_context, request

logger = logging.getLogger("audit")


def log_event(action: str, user_id: int | None = None, detail: str = "") -> None:
    """Emit a structured audit log line for ``action``."""
    ip = ""
    request_id = "-"
    if has_request_context():
        ip = request.remote_addr or ""
        request_id = getattr(g, "request_id", "-")

    logger.info(
        "audit: %s user_id=%s detail=%s ip=%s",
        action, user_id, detail, ip,
        extra={"request_id": request_id, "user_id": user_id},
    )
