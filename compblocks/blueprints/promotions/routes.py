from __future__ import annotations

from typing import Optional

from flask import Blueprint, jsonify, request

from ...auth import current_user_id, unauthorized
from ...services import movement_recorder

bp = Blueprint("promotions", __name__)


def _promotion_response(promotions: object, user_id: str, store_id: Optional[str] = None):
    if not promotions or not isinstance(promotions, list):
        return jsonify({"success": False, "error": "no promotion data"}), 400

    result = movement_recorder.record_promotions(promotions, created_by=user_id, store_id=store_id)
    body = {
        "success": result.success,
        "created": result.created,
        "skipped": result.skipped,
        "errors": [error.to_dict() for error in result.errors],
    }
    if result.errors:
        body["error"] = "; ".join(error.error for error in result.errors)
    return jsonify(body)


@bp.route("/api/promotions/batch-global", methods=["POST"])
def promotion_batch_global():
    user_id = current_user_id()
    if not user_id:
        return unauthorized()
    payload = request.get_json(silent=True) or {}
    promotions = payload.get("promotions") if isinstance(payload, dict) else None
    return _promotion_response(promotions, user_id)


@bp.route("/api/promotions/batch", methods=["POST"])
def promotion_batch_store():
    user_id = current_user_id()
    if not user_id:
        return unauthorized()
    payload = request.get_json(silent=True) or {}
    if not isinstance(payload, dict):
        payload = {}
    store_id = str(payload.get("store_id") or "").strip()
    if not store_id:
        return jsonify({"success": False, "error": "store_id is required"}), 400
    return _promotion_response(payload.get("promotions"), user_id, store_id)
