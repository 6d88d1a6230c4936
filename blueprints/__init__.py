"""
Blueprint registration for Alias Chat.

All blueprints are registered without URL prefixes; routes carry their own /api paths.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.core import bp as core_bp
    from blueprints.messages import bp as messages_bp
    from blueprints.guesses import bp as guesses_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(messages_bp)
    app.register_blueprint(guesses_bp)
