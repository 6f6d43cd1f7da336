from __future__ import annotations

from flask import Blueprint, Response, jsonify, request

from ...auth import current_user_id, unauthorized
from ...services import snapshot_service

bp = Blueprint("monthly_status", __name__)


@bp.route("/api/monthly-status", methods=["GET"])
def month_view():
    month = request.args.get("month")
    store_id = request.args.get("store_id") or None
    rows = snapshot_service.month_rows(month, store_id)
    return jsonify({"month": month, "store_id": store_id, "staff": rows})


@bp.route("/api/monthly-status/<employee_code>/<month>", methods=["GET"])
def get_snapshot(employee_code: str, month: str):
    return jsonify(snapshot_service.get_snapshot(employee_code, month).to_dict())


@bp.route("/api/monthly-status/<employee_code>/<month>", methods=["PUT"])
def save_snapshot(employee_code: str, month: str):
    if not current_user_id():
        return unauthorized()
    payload = request.get_json(force=True) or {}
    snapshot = snapshot_service.save_snapshot(employee_code, month, payload)
    return jsonify({"success": True, "snapshot": snapshot.to_dict()})


@bp.route("/api/monthly-status/<employee_code>/<month>", methods=["DELETE"])
def delete_snapshot(employee_code: str, month: str):
    if not current_user_id():
        return unauthorized()
    snapshot_service.delete_snapshot(employee_code, month)
    return jsonify({"success": True})


@bp.route("/api/monthly-status/confirm", methods=["POST"])
def confirm_month():
    if not current_user_id():
        return unauthorized()
    payload = request.get_json(force=True) or {}
    confirmed = snapshot_service.confirm_month(payload.get("month"), payload.get("store_id") or None)
    return jsonify({"success": True, "confirmed": confirmed})


@bp.route("/api/monthly-status/reclassify", methods=["POST"])
def reclassify_month():
    if not current_user_id():
        return unauthorized()
    payload = request.get_json(force=True) or {}
    changed = snapshot_service.reclassify_month(payload.get("month"))
    return jsonify({"success": True, "updated": changed})


@bp.route("/api/monthly-status/export.csv")
def export_csv():
    buffer, filename = snapshot_service.export_month_csv(request.args.get("month"), request.args.get("store_id") or None)
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
