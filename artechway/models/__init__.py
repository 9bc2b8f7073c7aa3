from __future__ import annotations

import secrets


def generate_hex_id(length: int = 32) -> str:
    """Generate a secure random hex string of specified length."""
    return secrets.token_hex(length // 2)


from artechway.models.user import User
from artechway.models.blog import Category, Tag, Post, Comment, post_tags

__all__ = [
    "generate_hex_id",
    "User",
    "Category",
    "Tag",
    "Post",
    "Comment",
    "post_tags",
]
