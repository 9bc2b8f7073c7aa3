from __future__ import annotations

from typing import Tuple

import structlog

from artechway.models.user import User
from artechway.repositories.user import (
    LOCKOUT_MINUTES,
    MAX_FAILED_LOGINS,
    get_user_by_username,
    increment_failed_login_attempts,
    is_user_login_locked,
    lockout_remaining_seconds,
    record_login,
    reset_failed_login_attempts,
)
from artechway.utils.crypto import verify_password

logger = structlog.get_logger(__name__)


def find_user_by_username(username: str) -> User | None:
    return get_user_by_username((username or "").strip())


def authenticate(username: str, password: str) -> Tuple[User | None, str | None]:
    """
    Authenticate user with lockout after repeated failures.
    Returns (user, error_message) tuple.
    """
    user = find_user_by_username(username)
    if not user:
        return None, "Invalid username or password"

    if is_user_login_locked(user):
        remaining_minutes = max(1, int(lockout_remaining_seconds(user) / 60))
        remaining_minutes = min(remaining_minutes, LOCKOUT_MINUTES)
        logger.warning("login_blocked_locked", user=user.hex_id)
        return None, (
            f"Account locked due to {MAX_FAILED_LOGINS} failed login attempts. "
            f"Please try again in {remaining_minutes} minutes."
        )

    if not verify_password(password, user.password_hash):
        increment_failed_login_attempts(user)
        attempts_remaining = MAX_FAILED_LOGINS - user.failed_login_attempts
        logger.info("login_failed", user=user.hex_id, attempts=user.failed_login_attempts)
        if attempts_remaining > 0:
            return None, f"Invalid username or password. {attempts_remaining} attempts remaining before account lockout."
        return None, (
            f"Invalid username or password. Account has been locked for {LOCKOUT_MINUTES} minutes "
            "due to too many failed attempts."
        )

    reset_failed_login_attempts(user)
    record_login(user)
    return user, None
