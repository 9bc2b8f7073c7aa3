from __future__ import annotations

import bleach
import markdown as md
from pygments.formatters import HtmlFormatter

from artechway.utils.html_sanitizer import sanitize_html

EXTENSIONS = [
    "fenced_code",
    "codehilite",
    "tables",
    "sane_lists",
    "nl2br",
]


def _external_link(attrs, new=False):
    href = attrs.get((None, "href"), "")
    if href.startswith(("http://", "https://")):
        attrs[(None, "target")] = "_blank"
        attrs[(None, "rel")] = "noopener noreferrer"
    return attrs


def render_markdown(text: str | None) -> str:
    if not text:
        return ""
    html = md.markdown(
        text,
        extensions=EXTENSIONS,
        extension_configs={
            "codehilite": {"guess_lang": False, "pygments_style": "default"}
        },
        output_format="html",
    )
    cleaned = sanitize_html(html)
    return bleach.linkify(cleaned, callbacks=[_external_link], skip_tags=["pre", "code"])


def pygments_css() -> str:
    return HtmlFormatter().get_style_defs('.codehilite')
