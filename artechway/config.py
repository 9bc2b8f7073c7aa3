from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env if present
ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)

DEFAULT_SQLITE_URI = "sqlite:///" + str(Path(__file__).resolve().parents[1] / "artechway.db")


def _csv(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY: str = os.getenv("SECRET_KEY", os.urandom(32).hex())

    SITE_NAME = os.getenv("SITE_NAME", "Artechway")
    SITE_TAGLINE = os.getenv("SITE_TAGLINE", "Where innovation meets inspiration.")

    # Database
    # Read from environment and then unset for security
    SQLALCHEMY_DATABASE_URI: str | None = os.environ.pop("DATABASE_URL", None)
    DATABASE_FALLBACK: bool = SQLALCHEMY_DATABASE_URI is None
    if SQLALCHEMY_DATABASE_URI is None:
        SQLALCHEMY_DATABASE_URI = DEFAULT_SQLITE_URI
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Ensure we use the 'blog' schema in Postgres
    if SQLALCHEMY_DATABASE_URI.startswith("postgresql"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_pre_ping": True,
            "connect_args": {
                "options": "-c search_path=blog"
            },
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}

    # Sessions - Production security settings
    SESSION_COOKIE_HTTPONLY = True   # Prevent XSS access to session cookies
    SESSION_COOKIE_SECURE = os.getenv("FLASK_ENV", "production") == "production"  # HTTPS only in production
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_DOMAIN = None
    SESSION_COOKIE_PATH = "/"
    ABSOLUTE_SESSION_MAX_AGE_SECONDS = int(os.getenv("ABSOLUTE_SESSION_MAX_AGE_SECONDS", str(4 * 60 * 60)))

    # Uploads and limits
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024)))

    # Caching (simple for dev)
    CACHE_TYPE = os.getenv("CACHE_TYPE", "SimpleCache")
    CACHE_DEFAULT_TIMEOUT = int(os.getenv("CACHE_DEFAULT_TIMEOUT", "300"))
    RELATED_POSTS_CACHE_SECONDS = int(os.getenv("RELATED_POSTS_CACHE_SECONDS", str(6 * 60 * 60)))

    # Rate limiting
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", "100 per minute")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")

    # Security headers
    # Use {nonce} placeholder for per-request nonce substitution in artechway.security.apply_security_headers
    SECURITY_CSP = (
        "default-src 'self'; "
        "script-src 'nonce-{nonce}' 'strict-dynamic' ;"
        "style-src 'self'; "
        # Header images come from our media route, data URIs (AI previews) and the placeholder host
        "img-src 'self' data: https://placehold.co; "
        "font-src 'self'; "
        "object-src 'none'; "
        "base-uri 'self'; "
        "frame-ancestors 'none'"
    )
    SECURITY_HSTS_SECONDS = 31536000

    SECURITY_PERMISSIONS_POLICY = (
        "geolocation=(), microphone=(), camera=(), payment=(), usb=(), "
        "magnetometer=(), gyroscope=(), accelerometer=(), ambient-light-sensor=(), "
        "autoplay=(), encrypted-media=(), fullscreen=(), midi=(), "
        "picture-in-picture=(), sync-xhr=(), web-share=()"
    )

    # Generative AI (Gemini)
    GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
    AI_ENABLED = _flag("AI_ENABLED", "true")
    AI_TEXT_MODEL = os.getenv("AI_TEXT_MODEL", "gemini-2.0-flash")
    AI_IMAGE_MODEL = os.getenv("AI_IMAGE_MODEL", "gemini-2.0-flash-preview-image-generation")

    # Content
    DEFAULT_AUTHOR = os.getenv("DEFAULT_AUTHOR", "Artechway Team")
    CATEGORY_ORDER = _csv(os.getenv("CATEGORY_ORDER", "Web Development,AI,Social Media Marketing,Latest Trends"))
    POSTS_PER_PAGE = int(os.getenv("POSTS_PER_PAGE", "9"))
    RELATED_POSTS_STRATEGY = os.getenv("RELATED_POSTS_STRATEGY", "category")
    PLACEHOLDER_IMAGE_URL = os.getenv("PLACEHOLDER_IMAGE_URL", "https://placehold.co/600x400")

    # Remote image import
    HTTP_CLIENT_ALLOWED_DOMAINS = _csv(os.getenv("HTTP_CLIENT_ALLOWED_DOMAINS", ""))
    HTTP_CLIENT_TIMEOUT = float(os.getenv("HTTP_CLIENT_TIMEOUT", "10"))

    # Flask env
    ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = ENV != "production"
