from __future__ import annotations

from flask import Blueprint

bp = Blueprint("auth", __name__)

# Import auth view routes
import artechway.blueprints.view.auth  # noqa: E402,F401
