from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin
from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from artechway.extensions import db
from artechway.models import generate_hex_id


class User(db.Model, UserMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    hex_id: Mapped[str] = mapped_column(db.String(32), unique=True, nullable=False, index=True, default=generate_hex_id)
    username: Mapped[str] = mapped_column(db.String(50), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False, index=True)
    display_name: Mapped[str | None] = mapped_column(db.String(120), nullable=True)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(db.Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(db.DateTime(timezone=True), server_default=func.now(), nullable=False)
    last_login: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    # Rate limiting fields
    failed_login_attempts: Mapped[int] = mapped_column(db.Integer, default=0, nullable=False)
    login_locked_until: Mapped[datetime | None] = mapped_column(db.DateTime(timezone=True), nullable=True)

    posts: Mapped[list["Post"]] = relationship(back_populates="author")

    @property
    def byline(self) -> str:
        return self.display_name or self.username

    def get_id(self) -> str:  # Flask-Login compatibility
        return str(self.id)
