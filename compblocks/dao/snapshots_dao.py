from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, List, Optional

from ..domain.models import MonthlySnapshot
from . import db

_FIELDS = (
    "employee_name",
    "store_id",
    "position",
    "employment_type",
    "is_pharmacist",
    "monthly_status",
    "employment_status",
    "work_days",
    "work_hours",
    "is_dual_position",
    "is_supervisor_rotation",
    "newbie_level",
    "extra_tasks_json",
    "block",
    "stage",
    "is_confirmed",
)

_SELECT = "SELECT id, employee_code, year_month, " + ", ".join(_FIELDS) + " FROM monthly_snapshots"


def _from_row(row: Any) -> MonthlySnapshot:
    return MonthlySnapshot(
        id=int(row["id"]),
        employee_code=row["employee_code"],
        year_month=row["year_month"],
        employee_name=row["employee_name"],
        store_id=row["store_id"],
        position=row["position"],
        employment_type=row["employment_type"],
        is_pharmacist=bool(row["is_pharmacist"]),
        monthly_status=row["monthly_status"],
        employment_status=row["employment_status"],
        work_days=row["work_days"],
        work_hours=row["work_hours"],
        is_dual_position=bool(row["is_dual_position"]),
        is_supervisor_rotation=bool(row["is_supervisor_rotation"]),
        newbie_level=row["newbie_level"],
        extra_tasks=tuple(json.loads(row["extra_tasks_json"]) if row["extra_tasks_json"] else ()),
        block=int(row["block"]),
        stage=row["stage"] or "",
        is_confirmed=bool(row["is_confirmed"]),
    )


def _values(snapshot: MonthlySnapshot) -> tuple:
    return (
        snapshot.employee_name,
        snapshot.store_id,
        snapshot.position,
        snapshot.employment_type,
        1 if snapshot.is_pharmacist else 0,
        snapshot.monthly_status,
        snapshot.employment_status,
        snapshot.work_days,
        snapshot.work_hours,
        1 if snapshot.is_dual_position else 0,
        1 if snapshot.is_supervisor_rotation else 0,
        snapshot.newbie_level,
        json.dumps(list(snapshot.extra_tasks), ensure_ascii=False),
        int(snapshot.block),
        snapshot.stage,
        1 if snapshot.is_confirmed else 0,
    )


def get_snapshot(employee_code: str, year_month: str) -> Optional[MonthlySnapshot]:
    row = db.query_one(
        _SELECT + " WHERE employee_code = ? AND year_month = ?",
        (employee_code, year_month),
    )
    return _from_row(row) if row else None


def list_month(year_month: str, store_id: Optional[str] = None) -> List[MonthlySnapshot]:
    sql = _SELECT + " WHERE year_month = ?"
    params: List[Any] = [year_month]
    if store_id is not None:
        sql += " AND store_id = ?"
        params.append(store_id)
    rows = db.query_all(sql + " ORDER BY store_id, employee_code", params)
    return [_from_row(row) for row in rows]


def list_employee_months(employee_code: str, from_month: Optional[str] = None) -> List[MonthlySnapshot]:
    """Snapshots of one employee in ascending month order, optionally from *from_month* on."""
    sql = _SELECT + " WHERE employee_code = ?"
    params: List[Any] = [employee_code]
    if from_month is not None:
        sql += " AND year_month >= ?"
        params.append(from_month)
    rows = db.query_all(sql + " ORDER BY year_month", params)
    return [_from_row(row) for row in rows]


def latest_before(employee_code: str, year_month: str) -> Optional[MonthlySnapshot]:
    row = db.query_one(
        _SELECT + " WHERE employee_code = ? AND year_month < ? ORDER BY year_month DESC LIMIT 1",
        (employee_code, year_month),
    )
    return _from_row(row) if row else None


def upsert_snapshot(snapshot: MonthlySnapshot) -> None:
    now = datetime.now(timezone.utc).isoformat()
    columns = ", ".join(_FIELDS)
    placeholders = ", ".join("?" for _ in _FIELDS)
    updates = ", ".join(f"{name}=excluded.{name}" for name in _FIELDS)
    db.execute(
        f"INSERT INTO monthly_snapshots(employee_code, year_month, {columns}, updated_at) "
        f"VALUES (?, ?, {placeholders}, ?) "
        f"ON CONFLICT(employee_code, year_month) DO UPDATE SET {updates}, updated_at=excluded.updated_at",
        (snapshot.employee_code, snapshot.year_month, *_values(snapshot), now),
    )


def delete_snapshot(employee_code: str, year_month: str) -> int:
    cur = db.execute(
        "DELETE FROM monthly_snapshots WHERE employee_code = ? AND year_month = ? AND is_confirmed = 0",
        (employee_code, year_month),
    )
    return cur.rowcount


def confirm_month(year_month: str, store_id: Optional[str] = None) -> int:
    sql = "UPDATE monthly_snapshots SET is_confirmed = 1 WHERE year_month = ? AND is_confirmed = 0"
    params: List[Any] = [year_month]
    if store_id is not None:
        sql += " AND store_id = ?"
        params.append(store_id)
    return db.execute(sql, params).rowcount
