"""
HTML sanitization utilities using bleach for secure content rendering.

Post bodies are authored in markdown (by hand or by the text model) and
rendered server-side, so everything that reaches a template goes through
``sanitize_html`` first.
"""
from __future__ import annotations

import bleach


# Allowed HTML tags for rendered post content
ALLOWED_TAGS = [
    # Structure
    'p', 'br', 'hr', 'div', 'span',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    # Text formatting
    'strong', 'b', 'em', 'i', 'u', 's', 'del', 'mark', 'small', 'sup', 'sub',
    # Links and images
    'a', 'img',
    # Lists
    'ul', 'ol', 'li',
    # Code
    'code', 'pre',
    # Quotes
    'blockquote', 'cite',
    # Tables
    'table', 'thead', 'tbody', 'tr', 'th', 'td',
]

# Allowed HTML attributes (no style attributes since CSP blocks inline CSS)
ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'title'],
    'blockquote': ['cite'],
    'th': ['align'],
    'td': ['align'],
    '*': ['id', 'class'],
}

# Allowed protocols for links
ALLOWED_PROTOCOLS = ['http', 'https', 'mailto']


def sanitize_html(html_content: str | None) -> str:
    """
    Sanitize HTML content to prevent XSS attacks while allowing safe formatting.

    Args:
        html_content: Raw HTML content to sanitize

    Returns:
        Sanitized HTML content safe for rendering
    """
    if not html_content:
        return ""

    return bleach.clean(
        html_content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,  # Strip disallowed tags instead of escaping
        strip_comments=True,
    )


PARAGRAPH_TAGS = ['strong', 'b', 'em', 'i', 'u', 's', 'mark', 'small', 'a', 'code', 'br']


def sanitize_paragraph(content: str | None) -> str:
    """Inline-only cleaning for short text such as excerpts and comments."""
    if not content:
        return ""
    return bleach.clean(
        content,
        tags=PARAGRAPH_TAGS,
        attributes={'a': ['href', 'title']},
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )


def is_safe_html(html_content: str | None) -> bool:
    """Return True when sanitizing would not change the content."""
    if not html_content:
        return True
    return sanitize_html(html_content) == html_content.strip()
