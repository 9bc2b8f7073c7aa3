"""Slug generation utilities."""
from __future__ import annotations

import re
import unicodedata


def slugify(text: str) -> str:
    """
    Convert a string to a URL-friendly slug.

    Args:
        text: The text to convert to a slug

    Returns:
        A URL-friendly slug string
    """
    if not text:
        return ""

    # Normalize unicode characters
    text = unicodedata.normalize('NFKD', text)

    text = text.lower()

    # Replace spaces and underscores with hyphens
    text = re.sub(r'[\s_]+', '-', text)

    # Remove all non-alphanumeric characters except hyphens
    text = re.sub(r'[^a-z0-9\-]', '', text)

    # Remove multiple consecutive hyphens
    text = re.sub(r'-+', '-', text)

    return text.strip('-')


def tag_name_from_slug(slug: str) -> str:
    """Best-effort display name for a tag slug.

    ``social-media-marketing`` becomes ``Social Media Marketing`` while a
    single word such as ``ai`` is treated as an acronym (``AI``).
    """
    if not slug:
        return ""
    words = [w for w in slug.split('-') if w]
    if len(words) > 1:
        return ' '.join(w[:1].upper() + w[1:] for w in words)
    return slug.upper()
