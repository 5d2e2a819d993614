from __future__ import annotations

from typing import Any

from flask import jsonify, request

from ..core.exceptions import ValidationError


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_response(message: str, status: int, **extra: Any):
    payload = {"success": False, "error": message}
    payload.update(extra)
    return jsonify(payload), status
