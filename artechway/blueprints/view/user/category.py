from __future__ import annotations

from flask import abort, current_app, jsonify, render_template, request

from artechway.extensions import limiter
from artechway.repositories.blog import get_category_by_slug, list_posts_by_category
from artechway.services.posts import serialize_post

from artechway.blueprints.blog import bp


@bp.get("/category/<slug>", endpoint="category")
@limiter.limit("120 per minute")
def by_category(slug: str):
    category = get_category_by_slug(slug)
    if not category:
        if request.args.get("format") == "json":
            return jsonify({"error": "not_found"}), 404
        abort(404)

    page = max(1, request.args.get("page", 1, type=int))
    per_page = current_app.config.get("POSTS_PER_PAGE", 9)
    posts, total = list_posts_by_category(slug, page=page, per_page=per_page)

    if request.args.get("format") == "json":
        return jsonify({
            "status": "ok",
            "page": "category",
            "category": {
                "name": category.name,
                "slug": category.slug,
                "description": category.description,
            },
            "items": [serialize_post(p) for p in posts],
            "total": total,
            "current_page": page,
        })
    pages = max(1, (total + per_page - 1) // per_page)
    return render_template(
        "category.html",
        category=category,
        posts=posts,
        page=page,
        total=total,
        pages=pages,
    )
