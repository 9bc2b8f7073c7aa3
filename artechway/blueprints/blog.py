from __future__ import annotations

from flask import Blueprint

bp = Blueprint("blog", __name__)

# Import public view routes
import artechway.blueprints.view.user  # noqa: E402,F401
