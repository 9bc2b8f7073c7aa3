from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import click
from flask import Flask, current_app, g, jsonify, request, session
from flask_login import current_user
from markupsafe import Markup
from sqlalchemy.exc import SQLAlchemyError

from artechway.config import DEFAULT_SQLITE_URI, Config
from artechway.extensions import (
    cache,
    csrf,
    db,
    limiter,
    login_manager,
    migrate,
)
from artechway.logging_config import configure_logging
from artechway.models.user import User  # ensure models imported for migrations
from artechway.security import apply_security_headers
from artechway.utils.html_sanitizer import sanitize_html, sanitize_paragraph
from artechway.utils.markdown import render_markdown


def create_app(config_overrides: Dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    # Load config
    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    configure_logging()
    app.permanent_session_lifetime = timedelta(minutes=int(os.getenv("SESSION_LIFETIME_MINUTES", "30")))

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    cache.init_app(app)
    limiter.init_app(app)

    login_manager.login_view = "auth.login"
    login_manager.login_message_category = "info"

    with app.app_context():
        if app.config.get("DATABASE_FALLBACK") and app.config["SQLALCHEMY_DATABASE_URI"] == DEFAULT_SQLITE_URI:
            app.logger.warning(
                "DATABASE_URL is not set; using local SQLite database at %s", DEFAULT_SQLITE_URI
            )
            db.create_all()
        from artechway.utils.admin_setup import report_admin_status
        report_admin_status()

    @login_manager.user_loader
    def load_user(user_id: str) -> User | None:
        from artechway.utils.db_retry import safe_db_operation
        try:
            return safe_db_operation(db.session.get, User, int(user_id))
        except (ValueError, SQLAlchemyError) as e:
            current_app.logger.error(f"Error loading user {user_id}: {str(e)}")
            return None

    @app.context_processor
    def template_context() -> dict:
        from artechway.repositories.blog import list_categories

        try:
            nav_categories = list_categories()
        except SQLAlchemyError as e:
            app.logger.error(f"Could not load navigation categories: {e}")
            nav_categories = []
        return {
            "site_name": app.config.get("SITE_NAME", "Artechway"),
            "site_tagline": app.config.get("SITE_TAGLINE", ""),
            "nav_categories": nav_categories,
            "current_year": datetime.now(timezone.utc).year,
            "script_nonce": getattr(g, "script_nonce", ""),
        }

    # Globals, not context, so imported macros see them too
    from artechway.services.posts import post_image_url

    app.add_template_global(post_image_url, "post_image_url")

    # Template filters for rendering user and model supplied HTML
    @app.template_filter("markdown")
    def markdown_filter(text: str) -> Markup:
        return Markup(render_markdown(text or ""))

    @app.template_filter("safe_html")
    def safe_html_filter(html_content: str) -> Markup:
        return Markup(sanitize_html(html_content or ""))

    @app.template_filter("safe_paragraph")
    def safe_paragraph_filter(content: str) -> Markup:
        return Markup(sanitize_paragraph(content or ""))

    @app.template_filter("datefmt")
    def datefmt_filter(value: datetime | None, fmt: str = "%B %d, %Y") -> str:
        return value.strftime(fmt) if value else ""

    # Request context enrichment for logging and absolute session timeout enforcement
    @app.before_request
    def add_request_context() -> None:
        g.request_id = request.headers.get("X-Request-ID") or os.urandom(8).hex()
        g.script_nonce = os.urandom(16).hex()
        abs_max = app.config.get("ABSOLUTE_SESSION_MAX_AGE_SECONDS")
        if abs_max:
            now = int(datetime.now(timezone.utc).timestamp())
            start = session.get("_login_time")
            if start is None and current_user.is_authenticated:
                session["_login_time"] = now
            elif isinstance(start, int) and now - start > int(abs_max):
                session.clear()

    @app.after_request
    def set_headers(resp):
        return apply_security_headers(resp)

    # Blueprints
    from artechway.blueprints.admin import bp as admin_bp
    from artechway.blueprints.auth import bp as auth_bp
    from artechway.blueprints.blog import bp as blog_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(blog_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")

    @app.get("/health")
    def health():
        try:
            db.session.execute(db.text("SELECT 1"))
            db_ok = "connected"
        except SQLAlchemyError:
            db_ok = "error"
        return jsonify({"status": "ok", "db": db_ok}), 200

    # Error handlers (JSON)
    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"error": "bad_request", "message": str(e)}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({"error": "unauthorized", "message": str(e)}), 401

    @app.errorhandler(403)
    def forbidden(e):
        return jsonify({"error": "forbidden", "message": str(e)}), 403

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "not_found", "message": "resource not found"}), 404

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({"error": "rate_limited", "message": "too many requests"}), 429

    @app.errorhandler(500)
    def server_error(e):
        return jsonify({"error": "server_error", "message": "internal server error"}), 500

    @app.cli.command("create-admin")
    @click.option("--username", prompt=True)
    @click.option("--email", prompt=True)
    @click.option("--display-name", default=None)
    @click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
    def create_admin(username: str, email: str, display_name: str | None, password: str) -> None:
        """Create an admin account."""
        from artechway.utils.admin_setup import create_admin_user

        if len(password) < 8:
            raise click.BadParameter("password must be at least 8 characters", param_hint="--password")
        try:
            create_admin_user(username=username, email=email, password=password, display_name=display_name)
        except ValueError:
            click.echo("User already exists")
            return
        click.echo("Admin user created")

    @app.cli.command("seed-categories")
    def seed_categories() -> None:
        """Create the default categories from CATEGORY_ORDER."""
        from artechway.repositories.blog import get_or_create_category

        for order, name in enumerate(app.config.get("CATEGORY_ORDER", [])):
            cat = get_or_create_category(name, display_order=order)
            click.echo(f"{cat.name} ({cat.slug})")

    return app
