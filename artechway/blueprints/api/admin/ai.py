from __future__ import annotations

from flask import current_app, jsonify, request
from pydantic import ValidationError

from artechway.decorators import admin_required
from artechway.extensions import limiter
from artechway.schemas.ai import GenerateBlogImageInput, GenerateBlogPostInput, SuggestRelatedPostsInput
from artechway.services import ai

from artechway.blueprints.admin import bp


def _ai_error(e: ai.AIError):
    if isinstance(e, ai.AIUnavailableError):
        return jsonify({"error": "ai_unavailable", "message": str(e)}), 503
    current_app.logger.warning(f"AI generation failed: {e}")
    return jsonify({"error": "generation_failed", "message": str(e)}), 502


def _bad_request(e: ValidationError):
    return jsonify({"error": "bad_request", "details": e.errors(include_url=False, include_context=False)}), 400


@bp.post("/api/ai/generate-post")
@limiter.limit("5 per minute; 50 per hour")
@admin_required
def ai_generate_post():
    try:
        payload = GenerateBlogPostInput.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _bad_request(e)
    try:
        result = ai.generate_blog_post(payload)
    except ai.AIError as e:
        return _ai_error(e)
    return jsonify({"status": "ok", "content": result.content})


@bp.post("/api/ai/generate-image")
@limiter.limit("5 per minute; 30 per hour")
@admin_required
def ai_generate_image():
    try:
        payload = GenerateBlogImageInput.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _bad_request(e)
    try:
        result = ai.generate_blog_image(payload)
    except ai.AIError as e:
        return _ai_error(e)
    return jsonify({"status": "ok", "image_url": result.image_url, "mime_type": result.mime_type})


@bp.post("/api/ai/suggest-related")
@limiter.limit("20 per minute")
@admin_required
def ai_suggest_related():
    try:
        payload = SuggestRelatedPostsInput.model_validate(request.get_json(silent=True) or {})
    except ValidationError as e:
        return _bad_request(e)
    try:
        titles = ai.suggest_related_posts(payload)
    except ai.AIError as e:
        return _ai_error(e)
    return jsonify({"status": "ok", "titles": titles})
