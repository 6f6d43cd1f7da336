from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..domain.models import EmployeeMaster
from . import db

_COLUMNS = (
    "employee_code, employee_name, store_id, employment_type, is_pharmacist, "
    "current_position, employment_status, is_active"
)


def _from_row(row: Any) -> EmployeeMaster:
    return EmployeeMaster(
        employee_code=row["employee_code"],
        employee_name=row["employee_name"],
        store_id=row["store_id"],
        employment_type=row["employment_type"],
        is_pharmacist=bool(row["is_pharmacist"]),
        current_position=row["current_position"],
        employment_status=row["employment_status"],
        is_active=bool(row["is_active"]),
    )


def list_employees(store_id: Optional[str] = None, include_inactive: bool = False) -> List[EmployeeMaster]:
    clauses: List[str] = []
    params: List[Any] = []
    if store_id is not None:
        clauses.append("store_id = ?")
        params.append(store_id)
    if not include_inactive:
        clauses.append("is_active = 1")
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = db.query_all(f"SELECT {_COLUMNS} FROM employees{where} ORDER BY employee_code", params)
    return [_from_row(row) for row in rows]


def get_employee(employee_code: str, store_id: Optional[str] = None) -> Optional[EmployeeMaster]:
    sql = f"SELECT {_COLUMNS} FROM employees WHERE employee_code = ? AND is_active = 1"
    params: List[Any] = [employee_code]
    if store_id is not None:
        sql += " AND store_id = ?"
        params.append(store_id)
    row = db.query_one(sql, params)
    return _from_row(row) if row else None


def upsert_employee(employee: EmployeeMaster) -> str:
    db.execute(
        f"INSERT INTO employees({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?) "
        "ON CONFLICT(employee_code) DO UPDATE SET "
        "employee_name=excluded.employee_name, store_id=excluded.store_id, "
        "employment_type=excluded.employment_type, is_pharmacist=excluded.is_pharmacist, "
        "current_position=excluded.current_position, employment_status=excluded.employment_status, "
        "is_active=excluded.is_active",
        (
            employee.employee_code,
            employee.employee_name,
            employee.store_id,
            employee.employment_type,
            1 if employee.is_pharmacist else 0,
            employee.current_position,
            employee.employment_status,
            1 if employee.is_active else 0,
        ),
    )
    return employee.employee_code


def update_current_position(employee_code: str, position: Optional[str]) -> int:
    cur = db.execute(
        "UPDATE employees SET current_position = ? WHERE employee_code = ?",
        (position, employee_code),
    )
    return cur.rowcount


def update_employment_status(employee_code: str, status: str) -> int:
    cur = db.execute(
        "UPDATE employees SET employment_status = ? WHERE employee_code = ?",
        (status, employee_code),
    )
    return cur.rowcount


def to_dict(employee: EmployeeMaster) -> Dict[str, Any]:
    return {
        "employee_code": employee.employee_code,
        "employee_name": employee.employee_name,
        "store_id": employee.store_id,
        "employment_type": employee.employment_type,
        "is_pharmacist": employee.is_pharmacist,
        "current_position": employee.current_position,
        "employment_status": employee.employment_status,
        "is_active": employee.is_active,
    }
