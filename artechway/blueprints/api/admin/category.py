from __future__ import annotations

from flask import jsonify, request
from pydantic import BaseModel, ValidationError

from artechway.decorators import admin_required
from artechway.extensions import limiter
from artechway.models import Category
from artechway.repositories.blog import (
    create_category,
    delete_category,
    get_category_by_slug,
    list_categories,
    update_category,
)
from artechway.schemas.categories import CategoryCreate, CategoryUpdate

from artechway.blueprints.admin import bp

WRITE_LIMIT = "10 per minute; 150 per hour"


def _category_json(cat: Category) -> dict:
    return {
        "hex_id": cat.hex_id,
        "name": cat.name,
        "slug": cat.slug,
        "description": cat.description,
        "display_order": cat.display_order,
    }


def _fields(payload: CategoryCreate | CategoryUpdate) -> dict:
    return {
        "name": payload.name,
        "slug": payload.resolved_slug(),
        "description": payload.description,
        "display_order": payload.display_order,
    }


def _load(schema: type[BaseModel]):
    try:
        return schema.model_validate(request.get_json(silent=True) or {})
    except ValidationError:
        return None


def _slug_taken():
    return jsonify({"error": "conflict", "message": "slug already exists"}), 409


@bp.get("/api/categories")
@admin_required
def category_list_api():
    return jsonify({"status": "ok", "categories": [_category_json(c) for c in list_categories()]})


@bp.post("/api/categories")
@limiter.limit(WRITE_LIMIT)
@admin_required
def category_create():
    payload = _load(CategoryCreate)
    if payload is None:
        return jsonify({"error": "bad_request"}), 400
    try:
        cat = create_category(**_fields(payload))
    except ValueError:
        return _slug_taken()
    return jsonify({"status": "ok", "category": _category_json(cat), "slug": cat.slug}), 201


@bp.patch("/api/categories/<slug>")
@limiter.limit(WRITE_LIMIT)
@admin_required
def category_update(slug: str):
    cat = get_category_by_slug(slug)
    if cat is None:
        return jsonify({"error": "not_found"}), 404
    payload = _load(CategoryUpdate)
    if payload is None:
        return jsonify({"error": "bad_request"}), 400
    try:
        update_category(cat, **_fields(payload))
    except ValueError:
        return _slug_taken()
    return jsonify({"status": "ok", "category": _category_json(cat), "slug": cat.slug})


@bp.delete("/api/categories/<slug>")
@limiter.limit(WRITE_LIMIT)
@admin_required
def category_delete(slug: str):
    cat = get_category_by_slug(slug)
    if cat is None:
        return jsonify({"error": "not_found"}), 404
    delete_category(cat)
    return jsonify({"status": "ok"})
