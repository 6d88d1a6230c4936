"""
Logging setup for Alias Chat.

``LOG_FORMAT=json`` emits one JSON object per line; anything else gives
plain text. Every request gets a short id in ``g.request_id`` and each
/api call produces one access line carrying that id and the session's
user id.
"""

from __future__ import annotations

import json
import logging
import time
import uuid

from flask import Flask, g, request, session

access_logger = logging.getLogger("access")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Single-line JSON, with request/user ids when the record carries them."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("request_id", "user_id"):
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _session_user_id():
    # Read straight from the session so logging never runs the user loader
    return session.get("_user_id")


def init_logging(app: Flask) -> None:
    level = app.config.get("LOG_LEVEL", "INFO")
    handler = logging.StreamHandler()
    if app.config.get("LOG_FORMAT", "text") == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    @app.before_request
    def _start_request():
        g.request_id = uuid.uuid4().hex[:12]
        g.request_started = time.perf_counter()

    @app.after_request
    def _access_log(response):
        if request.path.startswith("/api"):
            started = g.get("request_started", time.perf_counter())
            user_id = _session_user_id()
            access_logger.info(
                "%s %s %s user=%s %.1fms",
                request.method,
                request.path,
                response.status_code,
                user_id or "-",
                (time.perf_counter() - started) * 1000,
                extra={"request_id": g.get("request_id", "-"), "user_id": user_id},
            )
        return response
