from __future__ import annotations

from flask import abort, flash, jsonify, redirect, render_template, request, url_for

from artechway.extensions import limiter
from artechway.forms.comments import CommentForm
from artechway.repositories.blog import add_comment, get_post_by_slug, list_comments
from artechway.services.posts import related_posts, serialize_post

from artechway.blueprints.blog import bp


@bp.get("/blog/<slug>")
@limiter.limit("120 per minute")
def post_detail(slug: str):
    post = get_post_by_slug(slug)
    if not post:
        if request.args.get("format") == "json":
            return jsonify({"error": "not_found"}), 404
        abort(404)

    related = related_posts(post)
    comments = list_comments(post)

    if request.args.get("format") == "json":
        return jsonify({
            "status": "ok",
            "page": "post",
            "post": serialize_post(post, include_content=True),
            "related_posts": [
                {"title": p.title, "slug": p.slug, "excerpt": p.excerpt}
                for p in related
            ],
            "comments": [
                {
                    "author": c.author_name,
                    "content": c.content,
                    "created_at": c.created_at.isoformat() if c.created_at else None,
                }
                for c in comments
            ],
        })

    return render_template(
        "post.html",
        post=post,
        related_posts=related,
        comments=comments,
        comment_form=CommentForm(),
    )


@bp.post("/blog/<slug>/comments")
@limiter.limit("10 per minute; 100 per hour")
def post_comment(slug: str):
    post = get_post_by_slug(slug)
    if not post:
        abort(404)
    form = CommentForm()
    if form.validate_on_submit():
        add_comment(
            post,
            content=form.content.data.strip(),
            author_name=(form.author_name.data or "").strip() or None,
        )
        flash("Comment posted.", "success")
    else:
        for errors in form.errors.values():
            for message in errors:
                flash(message, "error")
    return redirect(url_for("blog.post_detail", slug=post.slug) + "#comments")
