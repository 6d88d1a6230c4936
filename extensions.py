"""
Shared Flask extensions.

Created unbound here and attached in create_app() so blueprints can import
them without a circular import on app.py.
"""

from __future__ import annotations

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["600 per hour"])
