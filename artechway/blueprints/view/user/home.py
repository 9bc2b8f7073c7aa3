from __future__ import annotations

from flask import current_app, jsonify, render_template, request

from artechway.extensions import limiter
from artechway.repositories.blog import list_all_posts
from artechway.services.posts import build_home_sections, serialize_post

from artechway.blueprints.blog import bp


@bp.get("/")
@limiter.limit("120 per minute")
def home():
    posts = list_all_posts()
    sections = build_home_sections(posts, current_app.config.get("CATEGORY_ORDER", []))

    if request.args.get("format") == "json":
        return jsonify({
            "status": "ok",
            "page": "home",
            "featured": serialize_post(sections.featured) if sections.featured else None,
            "trending": [serialize_post(p) for p in sections.trending],
            "categories": {
                name: [serialize_post(p) for p in items]
                for name, items in sections.categories.items()
            },
        })

    return render_template("home.html", sections=sections)
