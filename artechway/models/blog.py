from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artechway.extensions import db
from artechway.models import generate_hex_id


post_tags = db.Table(
    "post_tags",
    db.Column("post_id", db.ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    db.Column("tag_id", db.ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Category(db.Model):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    name: Mapped[str] = mapped_column(db.String(80), nullable=False)
    slug: Mapped[str] = mapped_column(db.String(120), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    display_order: Mapped[int] = mapped_column(db.Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), onupdate=func.now())

    posts: Mapped[list["Post"]] = relationship(back_populates="category")

    __table_args__ = (
        Index("ix_categories_display_order", "display_order"),
    )


class Tag(db.Model):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    name: Mapped[str] = mapped_column(db.String(60), nullable=False)
    slug: Mapped[str] = mapped_column(db.String(80), unique=True, nullable=False, index=True)

    posts: Mapped[list["Post"]] = relationship(secondary=post_tags, back_populates="tags")


class Post(db.Model):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    title: Mapped[str] = mapped_column(db.String(200), nullable=False)
    slug: Mapped[str] = mapped_column(db.String(220), unique=True, nullable=False, index=True)
    author_name: Mapped[str] = mapped_column(db.String(120), nullable=False)
    excerpt: Mapped[str | None] = mapped_column(db.String(300), nullable=True)
    content: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    image_data: Mapped[bytes | None] = mapped_column(db.LargeBinary, nullable=True)
    image_mime: Mapped[str | None] = mapped_column(db.String(100), nullable=True)
    image_hint: Mapped[str | None] = mapped_column(db.String(120), nullable=True)
    ai_generated: Mapped[bool] = mapped_column(db.Boolean, default=False, nullable=False)
    category_id: Mapped[int | None] = mapped_column(db.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    author_id: Mapped[int | None] = mapped_column(db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), onupdate=func.now())

    author: Mapped["User"] = relationship(back_populates="posts")
    category: Mapped[Category | None] = relationship(back_populates="posts")
    tags: Mapped[list[Tag]] = relationship(secondary=post_tags, back_populates="posts", order_by=Tag.name)
    comments: Mapped[list["Comment"]] = relationship(back_populates="post", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_posts_created_at", "created_at"),
    )

    @property
    def tag_names(self) -> list[str]:
        return [t.name for t in self.tags]

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None


class Comment(db.Model):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    post_id: Mapped[int] = mapped_column(db.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    author_name: Mapped[str] = mapped_column(db.String(80), nullable=False, default="Guest User")
    content: Mapped[str] = mapped_column(db.Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)

    post: Mapped[Post] = relationship(back_populates="comments")
