from __future__ import annotations

from flask import current_app, jsonify, render_template, request

from artechway.extensions import limiter
from artechway.repositories.blog import list_tags_in_use, search_posts
from artechway.services.posts import serialize_post

from artechway.blueprints.blog import bp


@bp.get("/blog")
@limiter.limit("120 per minute")
def blog():
    """Blog listing with search and tag filters"""
    page = max(1, request.args.get("page", 1, type=int))
    per_page = current_app.config.get("POSTS_PER_PAGE", 9)
    search = (request.args.get("search") or "").strip()
    tag = (request.args.get("tag") or "").strip()

    posts, total = search_posts(search or None, tag or None, page=page, per_page=per_page)
    pages = max(1, (total + per_page - 1) // per_page)

    if request.args.get("format") == "json":
        return jsonify({
            "status": "ok",
            "page": "blog",
            "posts": [serialize_post(p) for p in posts],
            "total": total,
            "current_page": page,
            "pages": pages,
            "search": search,
            "tag": tag,
        })

    return render_template(
        "blog.html",
        posts=posts,
        tags=list_tags_in_use(),
        search=search,
        tag=tag,
        total=total,
        page=page,
        pages=pages,
    )
