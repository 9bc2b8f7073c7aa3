from __future__ import annotations

from flask import Blueprint, jsonify

from artechway.decorators import admin_required
from artechway.repositories.blog import count_posts, list_categories, list_posts, list_tags
from artechway.services.ai import ai_enabled

bp = Blueprint("admin", __name__)

import artechway.blueprints.view.admin  # noqa: E402,F401
import artechway.blueprints.api.admin  # noqa: E402,F401


@bp.get("/api")
@admin_required
def api_dashboard():
    """Counts, the five newest posts and whether Gemini is configured."""
    recent, _ = list_posts(page=1, per_page=5)
    return jsonify(
        {
            "status": "ok",
            "page": "admin_dashboard",
            "stats": {
                "categories": len(list_categories()),
                "posts": count_posts(),
                "tags": len(list_tags()),
            },
            "recent_posts": [{"hex_id": p.hex_id, "title": p.title, "slug": p.slug} for p in recent],
            "ai_enabled": ai_enabled(),
        }
    )
