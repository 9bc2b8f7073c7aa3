from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from artechway.extensions import db
from artechway.models.user import User

MAX_FAILED_LOGINS = 3
LOCKOUT_MINUTES = 15


def get_user_by_hex_id(hex_id: str) -> Optional[User]:
    return db.session.execute(db.select(User).filter_by(hex_id=hex_id)).scalar_one_or_none()


def get_user_by_username(username: str) -> Optional[User]:
    return db.session.execute(db.select(User).filter_by(username=username)).scalar_one_or_none()


def get_first_admin() -> Optional[User]:
    return db.session.execute(
        db.select(User).filter_by(is_admin=True).order_by(User.id.asc()).limit(1)
    ).scalar_one_or_none()


def increment_failed_login_attempts(user: User) -> None:
    """Increment failed login attempts and set lockout if needed."""
    user.failed_login_attempts += 1
    if user.failed_login_attempts >= MAX_FAILED_LOGINS:
        user.login_locked_until = datetime.now(timezone.utc) + timedelta(minutes=LOCKOUT_MINUTES)
    db.session.commit()


def reset_failed_login_attempts(user: User) -> None:
    """Reset failed login attempts and clear lockout."""
    user.failed_login_attempts = 0
    user.login_locked_until = None
    db.session.commit()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def lockout_remaining_seconds(user: User) -> float:
    if user.login_locked_until is None:
        return 0.0
    return (_as_utc(user.login_locked_until) - datetime.now(timezone.utc)).total_seconds()


def is_user_login_locked(user: User) -> bool:
    """Check if user is currently locked out from login attempts.

    An expired lockout is cleared as a side effect.
    """
    if user.login_locked_until is None:
        return False

    if lockout_remaining_seconds(user) <= 0:
        reset_failed_login_attempts(user)
        return False

    return True


def record_login(user: User) -> None:
    user.last_login = datetime.now(timezone.utc)
    db.session.commit()
