from __future__ import annotations

from flask import current_app, jsonify, render_template, request

from artechway.extensions import limiter
from artechway.repositories.blog import get_tag_by_slug, list_posts_by_tag
from artechway.services.posts import serialize_post
from artechway.utils.slug import tag_name_from_slug

from artechway.blueprints.blog import bp


@bp.get("/tag/<slug>", endpoint="tag")
@limiter.limit("120 per minute")
def by_tag(slug: str):
    # Unknown tags render an empty page rather than a 404
    tag = get_tag_by_slug(slug)
    tag_name = tag.name if tag else tag_name_from_slug(slug)

    page = max(1, request.args.get("page", 1, type=int))
    per_page = current_app.config.get("POSTS_PER_PAGE", 9)
    posts, total = list_posts_by_tag(slug, page=page, per_page=per_page) if tag else ([], 0)

    if request.args.get("format") == "json":
        return jsonify({
            "status": "ok",
            "page": "tag",
            "tag": {"name": tag_name, "slug": slug},
            "items": [serialize_post(p) for p in posts],
            "total": total,
            "current_page": page,
        })
    pages = max(1, (total + per_page - 1) // per_page)
    return render_template(
        "tag.html",
        tag_name=tag_name,
        slug=slug,
        posts=posts,
        page=page,
        total=total,
        pages=pages,
    )
