from __future__ import annotations

from flask import Blueprint, jsonify, request

from ...auth import current_user_id, unauthorized
from ...dao import movements_dao
from ...services import movement_recorder, propagation

bp = Blueprint("movements", __name__)


@bp.route("/api/employee-movements/batch", methods=["POST"])
def movement_batch():
    user_id = current_user_id()
    if not user_id:
        return unauthorized()

    payload = request.get_json(silent=True) or {}
    movements = payload.get("movements") if isinstance(payload, dict) else None
    if not movements or not isinstance(movements, list):
        return jsonify({"success": False, "error": "no movement data"}), 400

    result = movement_recorder.record(movements, created_by=user_id)
    message = f"created {result.created} movement records, skipped {result.skipped} duplicates"
    if result.errors:
        message += f", {len(result.errors)} rows failed"
    return jsonify(
        {
            "success": result.success,
            "created": result.created,
            "skipped": result.skipped,
            "message": message,
            "errors": [error.to_dict() for error in result.errors],
        }
    )


@bp.route("/api/employee-movements", methods=["GET"])
def list_movements():
    employee_code = (request.args.get("employee_code") or "").strip().upper() or None
    store_id = request.args.get("store_id") or None
    records = movements_dao.list_movements(employee_code=employee_code, store_id=store_id)
    return jsonify({"movements": [record.to_dict() for record in records]})


@bp.route("/api/employee-movements/replay/<employee_code>", methods=["POST"])
def replay_movements(employee_code: str):
    if not current_user_id():
        return unauthorized()
    count = propagation.replay(employee_code.strip().upper())
    return jsonify({"success": True, "replayed": count})
