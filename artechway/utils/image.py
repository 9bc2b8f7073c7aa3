"""Header image checks and re-encoding.

Every image a post carries (upload, remote fetch or model output) goes through
``validate_and_rewrite`` before it reaches the database, so stored bytes are
always a freshly encoded PNG, JPEG or WEBP without metadata.
"""
from __future__ import annotations

import base64
import binascii
import io
import os
import re
from typing import NamedTuple

from PIL import Image, UnidentifiedImageError


class ImageFormat(NamedTuple):
    mime: str
    ext: str


FORMATS = {
    "PNG": ImageFormat("image/png", ".png"),
    "JPEG": ImageFormat("image/jpeg", ".jpg"),
    "WEBP": ImageFormat("image/webp", ".webp"),
}
EXTENSIONS = {".png": "PNG", ".jpg": "JPEG", ".jpeg": "JPEG", ".webp": "WEBP"}

MAX_PIXELS = 20_000_000
HEADER_MAX_SIZE = (1600, 900)
DEFAULT_MAX_BYTES = 5 * 1024 * 1024

DATA_URI_RE = re.compile(r"^data:(?P<mime>image/[a-z0-9.+-]+);base64,(?P<data>[A-Za-z0-9+/=\s]+)$", re.IGNORECASE)


def _read_header(data: bytes) -> tuple[str, int, int] | None:
    """Return (format, width, height) or None when Pillow cannot read the bytes."""
    try:
        with Image.open(io.BytesIO(data)) as im:
            im.verify()
        # verify() leaves the image unusable, so reopen for the size
        with Image.open(io.BytesIO(data)) as im:
            fmt = (im.format or "").upper()
            return ("JPEG" if fmt == "JPG" else fmt), im.width, im.height
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError):
        return None


def validate_image(data: bytes, max_bytes: int = DEFAULT_MAX_BYTES) -> tuple[bool, str | None, dict]:
    """Returns (ok, error, info). info: format, width, height."""
    if not data:
        return False, "empty_file", {}
    if len(data) > max_bytes:
        return False, "file_too_large", {"max_bytes": max_bytes}

    header = _read_header(data)
    if header is None:
        return False, "invalid_image", {}
    fmt, width, height = header
    if fmt not in FORMATS:
        return False, "unsupported_format", {"format": fmt}
    if width * height > MAX_PIXELS:
        return False, "too_many_pixels", {"width": width, "height": height}
    return True, None, {"format": fmt, "width": width, "height": height}


def _flatten(im: Image.Image, fmt: str) -> Image.Image:
    if fmt == "PNG":
        return im if im.mode in ("RGBA", "RGB", "LA", "L") else im.convert("RGBA")
    if im.mode in ("RGBA", "LA"):
        background = Image.new("RGB", im.size, (255, 255, 255))
        background.paste(im, mask=im.split()[-1])
        return background
    return im if im.mode == "RGB" else im.convert("RGB")


def rewrite_image(data: bytes, target_format: str | None = None, max_size: tuple[int, int] | None = None) -> tuple[bytes, str, str]:
    """Re-encode ``data``, dropping EXIF/ICC and anything appended to the file.

    Returns (bytes, format, mime). Images larger than ``max_size`` are shrunk
    to fit while keeping their aspect ratio.
    """
    header = _read_header(data)
    if header is None:
        raise ValueError("invalid_image")

    fmt = target_format or header[0]
    if fmt not in FORMATS:
        fmt = "PNG"

    with Image.open(io.BytesIO(data)) as im:
        if max_size and (im.width > max_size[0] or im.height > max_size[1]):
            im.thumbnail(max_size, Image.Resampling.LANCZOS)
        im = _flatten(im, fmt)

        params: dict = {"optimize": True}
        if fmt == "JPEG":
            params["quality"] = 85
        elif fmt == "WEBP":
            params.update(quality=85, method=5)
        out = io.BytesIO()
        im.save(out, format=fmt, **params)

    return out.getvalue(), fmt, FORMATS[fmt].mime


def validate_and_rewrite(
    data: bytes,
    original_filename: str | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_size: tuple[int, int] | None = None,
) -> tuple[bool, str | None, dict, bytes | None]:
    """Validate then re-encode.

    Returns (ok, error, info, rewritten_bytes). On success info carries the
    format and mime, plus ``extension_mismatch`` when the filename lies about
    the content.
    """
    ok, err, info = validate_image(data, max_bytes=max_bytes)
    if not ok:
        return False, err, info, None

    try:
        rewritten, fmt, mime = rewrite_image(data, max_size=max_size)
    except (ValueError, OSError) as e:
        return False, "processing_error", {**info, "exception": type(e).__name__}, None

    info = {**info, "format": fmt, "mime": mime}
    if original_filename:
        ext = os.path.splitext(original_filename.lower())[1]
        if EXTENSIONS.get(ext) != fmt:
            info["extension_mismatch"] = {"provided_ext": ext or None, "suggested_ext": FORMATS[fmt].ext}
    return True, None, info, rewritten


def to_data_uri(data: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> tuple[bytes, str]:
    """Split a base64 ``data:`` URI into (bytes, mime). Raises ValueError on malformed input."""
    match = DATA_URI_RE.match(uri or "")
    if not match:
        raise ValueError("invalid_data_uri")
    try:
        data = base64.b64decode("".join(match.group("data").split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("invalid_data_uri") from e
    return data, match.group("mime")
