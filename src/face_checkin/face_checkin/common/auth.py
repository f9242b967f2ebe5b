from __future__ import annotations

import hmac
from functools import wraps

from flask import current_app, jsonify, request


def _unauthorized(message: str):
    response = jsonify({"error": message})
    response.status_code = 401
    response.headers["WWW-Authenticate"] = 'Basic realm="Admin Panel"'
    return response


def admin_required(view):
    """HTTP Basic gate for admin endpoints (ADMIN_USER / ADMIN_PASS)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        auth = request.authorization
        if auth is None or auth.type != "basic":
            return _unauthorized("admin login required")

        expected_user = current_app.config.get("ADMIN_USER") or ""
        expected_pass = current_app.config.get("ADMIN_PASS") or ""
        if not expected_user or not expected_pass:
            return _unauthorized("admin credentials are not configured")

        user_ok = hmac.compare_digest(str(auth.username or "").encode(), expected_user.encode())
        pass_ok = hmac.compare_digest(str(auth.password or "").encode(), expected_pass.encode())
        if not (user_ok and pass_ok):
            return _unauthorized("wrong username or password")

        return view(*args, **kwargs)

    return wrapper
