from __future__ import annotations

from typing import Optional

from flask import current_app
from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from artechway.extensions import db
from artechway.models.user import User
from artechway.utils.crypto import hash_password


def check_admin_user_exists() -> bool:
    """Return True when at least one admin account exists."""
    if not inspect(db.engine).has_table("users"):
        return False
    admin_count = db.session.execute(
        db.select(db.func.count(User.id)).filter_by(is_admin=True)
    ).scalar()
    return (admin_count or 0) > 0


def report_admin_status() -> Optional[str]:
    """
    Log whether an admin account is configured.

    Admin accounts are created with the 'flask create-admin' command. Errors
    are logged and never block startup.

    Returns:
        A hint message when no admin exists, otherwise None.
    """
    try:
        if not inspect(db.engine).has_table("users"):
            current_app.logger.info("Users table not found yet; skipping admin check")
            return None
        if check_admin_user_exists():
            return None
        current_app.logger.warning("No admin user exists. Create one using: flask create-admin")
        return "No admin user found. Use 'flask create-admin' to create one."
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error checking for admin user: {str(e)}")
        return None


def create_admin_user(*, username: str, email: str, password: str, display_name: str | None = None) -> User:
    """Create an admin account. Raises ValueError("user_exists") on duplicates."""
    existing = db.session.execute(
        db.select(User).where((User.username == username) | (User.email == email))
    ).scalar_one_or_none()
    if existing is not None:
        raise ValueError("user_exists")
    user = User(
        username=username,
        email=email,
        display_name=display_name,
        password_hash=hash_password(password),
        is_admin=True,
    )
    db.session.add(user)
    db.session.commit()
    return user
