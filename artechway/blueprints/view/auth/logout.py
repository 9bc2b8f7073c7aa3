from __future__ import annotations

from flask import flash, redirect, session, url_for
from flask_login import logout_user

from artechway.blueprints.auth import bp


@bp.route("/logout")
def logout():
    logout_user()
    session.pop("_login_time", None)
    flash("You have been logged out.", "info")
    return redirect(url_for("auth.login"))
