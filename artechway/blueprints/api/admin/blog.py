from __future__ import annotations

from flask import current_app, jsonify, request
from flask_login import current_user
from pydantic import ValidationError

from artechway.decorators import admin_required
from artechway.extensions import limiter
from artechway.repositories.blog import (
    create_post,
    delete_post,
    get_category_by_id,
    get_post_by_hex_id,
    list_posts,
    update_post,
)
from artechway.schemas.ai import GenerateBlogPostInput
from artechway.schemas.posts import PostCreate, PostUpdate
from artechway.services import ai
from artechway.services.posts import apply_post_image, default_excerpt, serialize_post
from artechway.utils.http_client import RemoteFetchError

from artechway.blueprints.admin import bp


def _unknown_category(category_id: int | None):
    """400 response when ``category_id`` names no category, else None."""
    if category_id is None or get_category_by_id(category_id) is not None:
        return None
    return jsonify({"error": "invalid_category", "message": f"category {category_id} does not exist"}), 400


def _generate_if_requested(payload) -> tuple[str, bool]:
    """Return (content, ai_generated), generating the body from the title when asked."""
    if payload.generate_content and not payload.content.strip():
        result = ai.generate_blog_post(GenerateBlogPostInput(title=payload.title))
        return result.content, True
    return payload.content, False


@bp.route("/api/posts", methods=["GET"])
@limiter.limit("60 per minute")
@admin_required
def list_blog_posts():
    """List all blog posts for admin"""
    page = max(1, request.args.get("page", 1, type=int))
    per_page = min(50, max(1, request.args.get("per_page", 10, type=int)))
    posts, total = list_posts(page=page, per_page=per_page)
    return jsonify({
        "status": "ok",
        "posts": [serialize_post(p) for p in posts],
        "total": total,
        "page": page,
        "per_page": per_page,
    })


@bp.route("/api/posts", methods=["POST"])
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def post_create():
    data = request.get_json(silent=True) or {}
    try:
        payload = PostCreate.model_validate(data)
    except ValidationError as e:
        return jsonify({"error": "bad_request", "details": e.errors(include_url=False, include_context=False)}), 400

    invalid = _unknown_category(payload.category_id)
    if invalid:
        return invalid

    try:
        content, generated = _generate_if_requested(payload)
    except ai.AIUnavailableError as e:
        return jsonify({"error": "ai_unavailable", "message": str(e)}), 503
    except ai.AIError as e:
        return jsonify({"error": "generation_failed", "message": str(e)}), 502
    if not content.strip():
        return jsonify({"error": "bad_request", "message": "content is required"}), 400

    try:
        p = create_post(
            title=payload.title,
            slug=payload.resolved_slug(),
            content=content,
            author_name=payload.author_name or current_app.config["DEFAULT_AUTHOR"],
            excerpt=default_excerpt(content, payload.excerpt),
            category_id=payload.category_id,
            author_id=current_user.id,
            tag_names=payload.tags,
            image_hint=payload.image_hint,
            ai_generated=generated,
        )
    except ValueError:
        return jsonify({"error": "conflict", "message": "slug already exists"}), 409

    image_error = None
    if payload.image_url or payload.generate_image:
        try:
            apply_post_image(p, image_url=payload.image_url, generate=payload.generate_image)
        except (ValueError, RemoteFetchError, ai.AIError) as e:
            current_app.logger.warning(f"Header image not saved for post {p.hex_id}: {e}")
            image_error = str(e)

    body = {"status": "ok", "post": serialize_post(p, include_content=True)}
    if image_error:
        body["image_error"] = image_error
    return jsonify(body), 201


@bp.route("/api/posts/<string:post_hex_id>", methods=["GET"])
@admin_required
def get_blog_post(post_hex_id: str):
    p = get_post_by_hex_id(post_hex_id)
    if not p:
        return jsonify({"error": "not_found"}), 404
    return jsonify({"status": "ok", "post": serialize_post(p, include_content=True)})


@bp.route("/api/posts/<string:post_hex_id>", methods=["PATCH", "PUT"])
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def post_update(post_hex_id: str):
    p = get_post_by_hex_id(post_hex_id)
    if not p:
        return jsonify({"error": "not_found"}), 404
    data = request.get_json(silent=True) or {}
    # Unspecified fields keep their current values
    merged = {
        "title": p.title,
        "slug": p.slug,
        "content": p.content,
        "author_name": p.author_name,
        "excerpt": p.excerpt,
        "category_id": p.category_id,
        "tags": p.tag_names,
        "image_hint": p.image_hint,
        **data,
    }
    try:
        payload = PostUpdate.model_validate(merged)
    except ValidationError as e:
        return jsonify({"error": "bad_request", "details": e.errors(include_url=False, include_context=False)}), 400
    if not payload.content.strip():
        return jsonify({"error": "bad_request", "message": "content is required"}), 400

    if payload.category_id != p.category_id:
        invalid = _unknown_category(payload.category_id)
        if invalid:
            return invalid

    excerpt = payload.excerpt
    if "content" in data and "excerpt" not in data:
        excerpt = default_excerpt(payload.content)

    try:
        update_post(
            p,
            title=payload.title,
            slug=payload.resolved_slug(),
            content=payload.content,
            author_name=payload.author_name or p.author_name,
            excerpt=excerpt,
            category_id=payload.category_id,
            tag_names=payload.tags,
            image_hint=payload.image_hint,
        )
    except ValueError:
        return jsonify({"error": "conflict", "message": "slug already exists"}), 409
    return jsonify({"status": "ok", "post": serialize_post(p, include_content=True)}), 200


@bp.route("/api/posts/<string:post_hex_id>", methods=["DELETE"])
@limiter.limit("10 per minute; 150 per hour")
@admin_required
def post_delete_api(post_hex_id: str):
    p = get_post_by_hex_id(post_hex_id)
    if not p:
        return jsonify({"error": "not_found"}), 404
    delete_post(p)
    return jsonify({"status": "ok"}), 200


@bp.post("/api/posts/<string:post_hex_id>/image")
@limiter.limit("5 per minute; 50 per hour")
@admin_required
def post_image_upload(post_hex_id: str):
    """Attach a header image from a multipart upload, a JSON ``image_url`` or ``{"generate": true}``."""
    p = get_post_by_hex_id(post_hex_id)
    if not p:
        return jsonify({"error": "not_found"}), 404
    data = request.get_json(silent=True) or {}
    upload = request.files.get("file")
    if upload is None and not data.get("image_url") and not data.get("generate"):
        return jsonify({"error": "bad_request", "message": "file, image_url or generate required"}), 400
    try:
        apply_post_image(
            p,
            upload=upload,
            image_url=data.get("image_url"),
            generate=bool(data.get("generate")),
        )
    except ai.AIUnavailableError as e:
        return jsonify({"error": "ai_unavailable", "message": str(e)}), 503
    except ai.AIError as e:
        return jsonify({"error": "generation_failed", "message": str(e)}), 502
    except (ValueError, RemoteFetchError) as e:
        return jsonify({"error": "invalid_image", "message": str(e)}), 400
    return jsonify({"status": "ok", "image": serialize_post(p)["image"], "image_mime": p.image_mime}), 200
