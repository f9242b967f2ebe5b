from __future__ import annotations

from typing import Any, Mapping

from flask import jsonify, request


def json_error(message: str, status: int):
    return jsonify({"error": message}), status


def request_data() -> Mapping[str, Any]:
    """Body fields from either a JSON or a form/multipart request."""

    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form
