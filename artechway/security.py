from __future__ import annotations

from flask import current_app, g, request
from werkzeug.wrappers.response import Response


def apply_security_headers(response: Response) -> Response:
    # HSTS (only meaningful over HTTPS)
    hsts_seconds = current_app.config.get("SECURITY_HSTS_SECONDS", 31536000)
    response.headers.setdefault("Strict-Transport-Security", f"max-age={hsts_seconds}; includeSubDomains")

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault("X-Frame-Options", "DENY")

    permissions_policy = current_app.config.get("SECURITY_PERMISSIONS_POLICY")
    if permissions_policy:
        response.headers.setdefault("Permissions-Policy", permissions_policy)

    # Never cache admin/auth pages
    if request.path.startswith(("/admin", "/auth")):
        response.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate, private")
        response.headers.setdefault("Pragma", "no-cache")
        response.headers.setdefault("Expires", "0")

    csp = current_app.config.get("SECURITY_CSP")
    if csp:
        nonce = getattr(g, "script_nonce", None)
        if "{nonce}" in csp and nonce:
            csp = csp.replace("{nonce}", nonce)
        response.headers.setdefault("Content-Security-Policy", csp)

    response.headers.setdefault("X-Request-ID", getattr(g, "request_id", ""))
    return response
