from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, jsonify, request

from ...auth import current_user_id, unauthorized
from ...dao import employees_dao
from ...domain import positions
from ...domain.models import EmployeeMaster
from ...services.snapshot_service import ValidationError, as_bool, check_choice

bp = Blueprint("employees", __name__)


def _employee_from_payload(payload: Dict[str, Any]) -> EmployeeMaster:
    code = str(payload.get("employee_code") or "").strip().upper()
    name = str(payload.get("employee_name") or "").strip()
    if not code or not name:
        raise ValidationError("employee_code and employee_name are required")
    employment_type = check_choice("employment_type", payload.get("employment_type"), positions.EMPLOYMENT_TYPES)
    status = check_choice("employment_status", payload.get("employment_status"), positions.EMPLOYMENT_STATUSES)
    return EmployeeMaster(
        employee_code=code,
        employee_name=name,
        store_id=payload.get("store_id") or None,
        employment_type=employment_type,
        is_pharmacist=as_bool(payload.get("is_pharmacist", False)),
        current_position=positions.resolve_position(payload.get("current_position") or payload.get("position")),
        employment_status=status or positions.ACTIVE,
        is_active=as_bool(payload.get("is_active", True)),
    )


@bp.route("/api/employees", methods=["GET"])
def list_employees():
    store_id = request.args.get("store_id") or None
    include_inactive = request.args.get("include_inactive") in {"1", "true"}
    employees = employees_dao.list_employees(store_id=store_id, include_inactive=include_inactive)
    return jsonify({"employees": [employees_dao.to_dict(emp) for emp in employees]})


@bp.route("/api/employees/<employee_code>", methods=["GET"])
def get_employee(employee_code: str):
    employee = employees_dao.get_employee(employee_code.strip().upper())
    if employee is None:
        return jsonify({"success": False, "error": "employee not found"}), 404
    return jsonify(employees_dao.to_dict(employee))


@bp.route("/api/employees", methods=["POST"])
def upsert_employees():
    if not current_user_id():
        return unauthorized()
    payload = request.get_json(force=True)
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict) and "employees" in payload:
        rows = payload["employees"] or []
    else:
        rows = [payload]
    saved = [employees_dao.upsert_employee(_employee_from_payload(row if isinstance(row, dict) else {})) for row in rows]
    return jsonify({"saved": saved}), 201
