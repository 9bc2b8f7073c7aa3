from __future__ import annotations

import re

_BLANK_LINE = re.compile(r'\n\s*\n')
_MD_LINK = re.compile(r'\[([^\]]*)\]\([^)]*\)')
_MD_MARKS = re.compile(r'(\*\*|__|\*|_|`|~~)')
_MD_HEADING = re.compile(r'^\s{0,3}#{1,6}\s*', re.MULTILINE)


def parse_tags(raw: str | None) -> list[str]:
    """Split a comma separated tag string.

    Whitespace is trimmed, empty entries dropped and duplicates removed
    case-insensitively, keeping the first spelling.
    """
    if not raw:
        return []
    tags: list[str] = []
    seen: set[str] = set()
    for part in raw.split(','):
        name = ' '.join(part.split())
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        tags.append(name)
    return tags


def split_paragraphs(markdown: str | None) -> list[str]:
    if not markdown:
        return []
    text = markdown.replace('\r\n', '\n')
    return [p.strip() for p in _BLANK_LINE.split(text) if p.strip()]


def strip_markdown(text: str) -> str:
    text = _MD_LINK.sub(r'\1', text)
    text = _MD_HEADING.sub('', text)
    text = _MD_MARKS.sub('', text)
    return ' '.join(text.split())


def make_excerpt(markdown: str | None, max_length: int = 200) -> str:
    """Plain-text summary built from the first paragraph of a markdown body."""
    paragraphs = split_paragraphs(markdown)
    if not paragraphs:
        return ""
    # A leading heading is usually the title repeated
    first = paragraphs[0]
    if first.lstrip().startswith('#') and len(paragraphs) > 1:
        first = paragraphs[1]
    plain = strip_markdown(first)
    if len(plain) <= max_length:
        return plain
    cut = plain[: max_length - 1]
    if ' ' in cut:
        cut = cut.rsplit(' ', 1)[0]
    return cut.rstrip(' ,.;:') + '…'
