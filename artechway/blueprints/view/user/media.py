from __future__ import annotations

import hashlib
import io
from datetime import datetime

from flask import jsonify, make_response, request, send_file

from artechway.extensions import limiter
from artechway.repositories.blog import get_post_by_hex_id
from artechway.utils.markdown import pygments_css

from artechway.blueprints.blog import bp

MEDIA_CACHE_CONTROL = "public, max-age=3600"


@bp.get("/media/posts/<string:hex_id>", endpoint="post_media")
@limiter.limit("300 per minute")
def media_post(hex_id: str):
    p = get_post_by_hex_id(hex_id)
    if not p or not p.image_data or not p.image_mime:
        return jsonify({"error": "not_found"}), 404

    etag = hashlib.sha256(p.image_data).hexdigest()
    if request.if_none_match.contains(etag):
        resp = make_response("", 304)
    else:
        resp = make_response(send_file(io.BytesIO(p.image_data), mimetype=p.image_mime, as_attachment=False))
    resp.headers["Cache-Control"] = MEDIA_CACHE_CONTROL
    resp.set_etag(etag)
    if isinstance(p.updated_at, datetime):
        resp.last_modified = p.updated_at
    return resp


@bp.get("/assets/pygments.css", endpoint="pygments_css")
def pygments_stylesheet():
    resp = make_response(pygments_css())
    resp.mimetype = "text/css"
    resp.headers["Cache-Control"] = "public, max-age=86400"
    return resp
