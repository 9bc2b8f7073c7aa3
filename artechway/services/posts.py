"""Post-level behaviour shared by the public pages, admin views and JSON API."""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import structlog
from flask import current_app, url_for

from artechway.extensions import cache
from artechway.models.blog import Post
from artechway.repositories.blog import (
    get_post_by_slug,
    list_post_titles,
    list_related_by_category,
    set_post_image,
)
from artechway.schemas.ai import GenerateBlogImageInput, SuggestRelatedPostsInput
from artechway.services import ai
from artechway.utils.http_client import HTTPClient
from artechway.utils.image import HEADER_MAX_SIZE, validate_and_rewrite
from artechway.utils.text import make_excerpt

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "Uncategorized"
TRENDING_COUNT = 3
RELATED_LIMIT = 3


@dataclass
class HomeSections:
    featured: Post | None = None
    trending: list[Post] = field(default_factory=list)
    categories: "OrderedDict[str, list[Post]]" = field(default_factory=OrderedDict)

    @property
    def is_empty(self) -> bool:
        return self.featured is None


def build_home_sections(posts: Sequence[Post], category_order: Iterable[str] = ()) -> HomeSections:
    """Split newest-first posts into featured, trending and per-category groups.

    Groups named in ``category_order`` come first in that order; any other
    category follows alphabetically.
    """
    sections = HomeSections()
    if not posts:
        return sections
    sections.featured = posts[0]
    sections.trending = list(posts[1:1 + TRENDING_COUNT])

    grouped: dict[str, list[Post]] = {}
    for post in posts[1 + TRENDING_COUNT:]:
        grouped.setdefault(post.category_name or UNCATEGORIZED, []).append(post)

    order = list(category_order)
    rank = {name: i for i, name in enumerate(order)}
    for name in sorted(grouped, key=lambda n: (rank.get(n, len(order)), n)):
        sections.categories[name] = grouped[name]
    return sections


def default_excerpt(content: str, excerpt: str | None = None) -> str | None:
    """Explicit excerpt when given, otherwise one derived from the body."""
    if excerpt and excerpt.strip():
        return excerpt.strip()
    return make_excerpt(content) or None


def _related_cache_key(post: Post) -> str:
    stamp = post.updated_at.isoformat() if post.updated_at else ""
    return f"related:{post.slug}:{stamp}"


def _related_by_ai(post: Post) -> list[Post]:
    key = _related_cache_key(post)
    slugs = cache.get(key)
    if slugs is None:
        pairs = list_post_titles(exclude_id=post.id)
        by_title = {title: slug for title, slug in pairs}
        titles = ai.suggest_related_posts(
            SuggestRelatedPostsInput(
                current_article_content=post.content,
                available_posts=list(by_title),
            ),
            limit=RELATED_LIMIT,
        )
        slugs = [by_title[t] for t in titles]
        cache.set(key, slugs, timeout=current_app.config.get("RELATED_POSTS_CACHE_SECONDS"))
    related = [get_post_by_slug(s) for s in slugs]
    return [p for p in related if p is not None][:RELATED_LIMIT]


def related_posts(post: Post, strategy: str | None = None) -> list[Post]:
    """Posts to show under an article. The AI strategy falls back to category matches."""
    strategy = strategy or current_app.config.get("RELATED_POSTS_STRATEGY", "category")
    if strategy == "ai":
        try:
            related = _related_by_ai(post)
            if related:
                return related
        except ai.AIError as e:
            logger.warning("related_posts_ai_fallback", post=post.slug, error=str(e))
    return list_related_by_category(post, limit=RELATED_LIMIT)


def _store_image(post: Post, data: bytes, filename: str | None = None) -> Post:
    ok, err, info, rewritten = validate_and_rewrite(
        data,
        original_filename=filename,
        max_bytes=current_app.config.get("MAX_CONTENT_LENGTH", 5 * 1024 * 1024),
        max_size=HEADER_MAX_SIZE,
    )
    if not ok:
        logger.info("post_image_rejected", post=post.slug, error=err)
        raise ValueError(err)
    return set_post_image(post, image_data=rewritten, image_mime=info["mime"])


def apply_post_image(post: Post, upload=None, image_url: str | None = None, generate: bool = False) -> Post:
    """Attach a header image to ``post``.

    An uploaded file wins over a remote URL, which wins over AI generation.
    Raises ValueError for rejected images, ``RemoteFetchError`` for blocked
    downloads and ``AIError`` when generation fails.
    """
    if upload is not None and getattr(upload, "filename", None):
        return _store_image(post, upload.read(), upload.filename)
    if image_url and image_url.strip():
        data, _ = HTTPClient().fetch_image(
            image_url.strip(), max_bytes=current_app.config.get("MAX_CONTENT_LENGTH", 5 * 1024 * 1024)
        )
        return _store_image(post, data)
    if generate:
        result = ai.generate_blog_image(GenerateBlogImageInput(title=post.title, content=post.content or ""))
        return _store_image(post, result.image_data)
    return post


def post_image_url(post: Post) -> str:
    if post.image_data:
        return url_for("blog.post_media", hex_id=post.hex_id, v=int(post.updated_at.timestamp()) if post.updated_at else None)
    return current_app.config["PLACEHOLDER_IMAGE_URL"]


def serialize_post(post: Post, include_content: bool = False) -> dict:
    data = {
        "id": post.id,
        "hex_id": post.hex_id,
        "title": post.title,
        "slug": post.slug,
        "author": post.author_name,
        "excerpt": post.excerpt,
        "image": post_image_url(post),
        "image_hint": post.image_hint,
        "tags": post.tag_names,
        "category": {
            "name": post.category.name,
            "slug": post.category.slug,
        } if post.category else None,
        "ai_generated": post.ai_generated,
        "created_at": post.created_at.isoformat() if post.created_at else None,
        "updated_at": post.updated_at.isoformat() if post.updated_at else None,
    }
    if include_content:
        data["content"] = post.content
    return data
