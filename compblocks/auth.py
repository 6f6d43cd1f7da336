"""Caller identity handed over by the upstream authentication layer."""
from __future__ import annotations

from typing import Optional

from flask import jsonify, request
from flask.typing import ResponseReturnValue

USER_HEADER = "X-User-Id"


def current_user_id() -> Optional[str]:
    value = (request.headers.get(USER_HEADER) or "").strip()
    return value or None


def unauthorized() -> ResponseReturnValue:
    return jsonify({"success": False, "error": "not signed in"}), 401
