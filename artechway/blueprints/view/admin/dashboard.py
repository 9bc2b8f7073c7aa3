from __future__ import annotations

from flask import render_template

from artechway.decorators import admin_required
from artechway.repositories.blog import count_posts, list_categories, list_posts, list_tags
from artechway.services.ai import ai_enabled

from artechway.blueprints.admin import bp


@bp.get("/")
@admin_required
def dashboard():
    """HTML-based admin dashboard"""
    posts, total = list_posts(page=1, per_page=5)
    return render_template(
        "admin/dashboard.html",
        categories=list_categories(),
        posts=posts,
        total_posts=count_posts(),
        total_tags=len(list_tags()),
        ai_available=ai_enabled(),
    )
