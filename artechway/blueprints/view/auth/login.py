from __future__ import annotations

from datetime import datetime, timezone

from flask import current_app, flash, redirect, render_template, request, session, url_for
from flask_login import current_user, login_user

from artechway.blueprints.auth import bp
from artechway.extensions import limiter
from artechway.forms.auth import LoginForm
from artechway.services import auth as auth_svc


def _safe_next(target: str | None) -> str | None:
    # Only allow relative in-site redirects
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@bp.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute; 20 per hour", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("admin.dashboard") if current_user.is_admin else url_for("blog.home"))

    form = LoginForm()
    if form.validate_on_submit():
        user, error_message = auth_svc.authenticate(form.username.data, form.password.data)
        if not user:
            flash(error_message or "Invalid credentials", "error")
            return render_template("auth/login.html", form=form)

        session.clear()
        login_user(user, remember=False)
        session["_login_time"] = int(datetime.now(timezone.utc).timestamp())
        current_app.logger.info(f"User {user.username} logged in")

        target = _safe_next(request.args.get("next"))
        if target:
            return redirect(target)
        return redirect(url_for("admin.dashboard") if user.is_admin else url_for("blog.home"))

    return render_template("auth/login.html", form=form)
