from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from artechway.extensions import db
from artechway.models.blog import Category, Comment, Post, Tag
from artechway.utils.slug import slugify


# Category repositories
def get_category_by_slug(slug: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(slug=slug)).scalar_one_or_none()


def list_categories() -> list[Category]:
    return list(db.session.execute(db.select(Category).order_by(Category.display_order, Category.name)).scalars())


def get_category_by_id(category_id: int) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(id=category_id)).scalar_one_or_none()


def get_category_by_hex_id(hex_id: str) -> Optional[Category]:
    return db.session.execute(db.select(Category).filter_by(hex_id=hex_id)).scalar_one_or_none()


def create_category(*, name: str, slug: str, description: str | None, display_order: int) -> Category:
    cat = Category(name=name, slug=slug, description=description, display_order=display_order)
    db.session.add(cat)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return cat


def update_category(cat: Category, *, name: str, slug: str, description: str | None, display_order: int) -> Category:
    cat.name = name
    cat.slug = slug
    cat.description = description
    cat.display_order = display_order
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return cat


def delete_category(cat: Category) -> None:
    db.session.delete(cat)
    db.session.commit()


def get_or_create_category(name: str, display_order: int = 0) -> Category:
    slug = slugify(name)
    cat = get_category_by_slug(slug)
    if cat:
        return cat
    return create_category(name=name.strip(), slug=slug, description=None, display_order=display_order)


# Tag repositories
def get_tag_by_slug(slug: str) -> Optional[Tag]:
    return db.session.execute(db.select(Tag).filter_by(slug=slug)).scalar_one_or_none()


def list_tags() -> list[Tag]:
    return list(db.session.execute(db.select(Tag).order_by(Tag.name)).scalars())


def list_tags_in_use() -> list[Tag]:
    stmt = db.select(Tag).where(Tag.posts.any()).order_by(Tag.name)
    return list(db.session.execute(stmt).scalars())


def get_or_create_tags(names: Iterable[str]) -> list[Tag]:
    """Resolve tag names to Tag rows, creating missing ones in the current session.

    The caller commits; new tags are flushed so they get ids.
    """
    tags: list[Tag] = []
    seen: set[str] = set()
    for name in names:
        slug = slugify(name)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        tag = get_tag_by_slug(slug)
        if tag is None:
            tag = Tag(name=name.strip(), slug=slug)
            db.session.add(tag)
            db.session.flush()
        tags.append(tag)
    return tags


# Post repositories
def get_post_by_slug(slug: str) -> Optional[Post]:
    return db.session.execute(db.select(Post).filter_by(slug=slug)).scalar_one_or_none()


def get_post_by_id(post_id: int) -> Optional[Post]:
    return db.session.execute(db.select(Post).filter_by(id=post_id)).scalar_one_or_none()


def get_post_by_hex_id(hex_id: str) -> Optional[Post]:
    return db.session.execute(db.select(Post).filter_by(hex_id=hex_id)).scalar_one_or_none()


def _newest_first(stmt):
    return stmt.order_by(Post.created_at.desc(), Post.id.desc())


def list_posts(page: int = 1, per_page: int = 10) -> tuple[list[Post], int]:
    stmt = _newest_first(db.select(Post))
    pag = db.paginate(stmt, page=page, per_page=per_page, error_out=False)
    return list(pag.items), pag.total


def list_all_posts() -> list[Post]:
    return list(db.session.execute(_newest_first(db.select(Post))).scalars())


def list_posts_by_category(
    category_slug: str,
    page: int = 1,
    per_page: int = 10,
) -> tuple[list[Post], int]:
    cat = get_category_by_slug(category_slug)
    if not cat:
        return [], 0
    stmt = _newest_first(db.select(Post).filter_by(category_id=cat.id))
    pag = db.paginate(stmt, page=page, per_page=per_page, error_out=False)
    return list(pag.items), pag.total


def list_posts_by_tag(
    tag_slug: str,
    page: int = 1,
    per_page: int = 10,
) -> tuple[list[Post], int]:
    stmt = _newest_first(db.select(Post).where(Post.tags.any(Tag.slug == tag_slug)))
    pag = db.paginate(stmt, page=page, per_page=per_page, error_out=False)
    return list(pag.items), pag.total


def search_posts(
    query: str | None = None,
    tag_slug: str | None = None,
    page: int = 1,
    per_page: int = 10,
) -> tuple[list[Post], int]:
    """Case-insensitive substring search over title, excerpt and content, optionally within one tag."""
    stmt = db.select(Post)
    term = (query or "").strip()
    if term:
        pattern = f"%{term}%"
        stmt = stmt.where(
            or_(
                Post.title.ilike(pattern),
                Post.excerpt.ilike(pattern),
                Post.content.ilike(pattern),
            )
        )
    if tag_slug:
        stmt = stmt.where(Post.tags.any(Tag.slug == tag_slug))
    pag = db.paginate(_newest_first(stmt), page=page, per_page=per_page, error_out=False)
    return list(pag.items), pag.total


def list_related_by_category(post: Post, limit: int = 3) -> list[Post]:
    if post.category_id is None:
        return []
    stmt = _newest_first(
        db.select(Post).where(Post.category_id == post.category_id, Post.id != post.id)
    ).limit(limit)
    return list(db.session.execute(stmt).scalars())


def list_post_titles(exclude_id: int | None = None) -> list[tuple[str, str]]:
    """Return (title, slug) pairs, newest first."""
    stmt = _newest_first(db.select(Post.title, Post.slug))
    if exclude_id is not None:
        stmt = stmt.where(Post.id != exclude_id)
    return [(row.title, row.slug) for row in db.session.execute(stmt)]


def create_post(
    *,
    title: str,
    slug: str,
    content: str,
    author_name: str,
    excerpt: str | None,
    category_id: int | None,
    author_id: int | None = None,
    tag_names: Iterable[str] = (),
    image_hint: str | None = None,
    ai_generated: bool = False,
) -> Post:
    p = Post(
        title=title,
        slug=slug,
        content=content,
        author_name=author_name,
        excerpt=excerpt,
        category_id=category_id,
        author_id=author_id,
        image_hint=image_hint,
        ai_generated=ai_generated,
    )
    db.session.add(p)
    try:
        p.tags = get_or_create_tags(tag_names)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return p


def update_post(
    p: Post,
    *,
    title: str,
    slug: str,
    content: str,
    author_name: str,
    excerpt: str | None,
    category_id: int | None,
    tag_names: Iterable[str] | None = None,
    image_hint: str | None = None,
    ai_generated: bool | None = None,
) -> Post:
    p.title = title
    p.slug = slug
    p.content = content
    p.author_name = author_name
    p.excerpt = excerpt
    p.category_id = category_id
    p.image_hint = image_hint
    if ai_generated is not None:
        p.ai_generated = ai_generated
    try:
        if tag_names is not None:
            p.tags = get_or_create_tags(tag_names)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("slug_conflict")
    return p


def delete_post(p: Post) -> None:
    db.session.delete(p)
    db.session.commit()


def set_post_image(p: Post, *, image_data: bytes, image_mime: str) -> Post:
    p.image_data = image_data
    p.image_mime = image_mime
    db.session.add(p)
    db.session.commit()
    return p


def count_posts() -> int:
    return db.session.execute(db.select(db.func.count(Post.id))).scalar() or 0


# Comment repositories
def list_comments(post: Post) -> list[Comment]:
    stmt = (
        db.select(Comment)
        .filter_by(post_id=post.id)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
    )
    return list(db.session.execute(stmt).scalars())


def add_comment(post: Post, *, content: str, author_name: str | None = None) -> Comment:
    c = Comment(post_id=post.id, content=content, author_name=author_name or "Guest User")
    db.session.add(c)
    db.session.commit()
    return c
