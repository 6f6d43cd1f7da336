from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from ..domain.models import MovementRecord
from . import db

_SELECT = (
    "SELECT id, employee_code, employee_name, store_id, movement_type, movement_date, "
    "old_value, new_value, notes, created_by, created_at FROM movement_history"
)


def _from_row(row: Any) -> MovementRecord:
    return MovementRecord(
        id=int(row["id"]),
        employee_code=row["employee_code"],
        employee_name=row["employee_name"],
        store_id=row["store_id"],
        movement_type=row["movement_type"],
        movement_date=row["movement_date"],
        old_value=row["old_value"],
        new_value=row["new_value"],
        notes=row["notes"],
        created_by=row["created_by"],
        created_at=row["created_at"],
    )


def exists(employee_code: str, movement_date: str, movement_type: str) -> bool:
    row = db.query_one(
        "SELECT 1 FROM movement_history WHERE employee_code = ? AND movement_date = ? AND movement_type = ?",
        (employee_code, movement_date, movement_type),
    )
    return row is not None


def insert(record: MovementRecord) -> MovementRecord:
    """Append *record*; raises ``sqlite3.IntegrityError`` on a duplicate key."""
    created_at = record.created_at or datetime.now(timezone.utc).isoformat(timespec="seconds")
    cur = db.execute(
        "INSERT INTO movement_history(employee_code, employee_name, store_id, movement_type, movement_date, "
        "old_value, new_value, notes, created_by, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
        (
            record.employee_code,
            record.employee_name,
            record.store_id,
            record.movement_type,
            record.movement_date,
            record.old_value,
            record.new_value,
            record.notes,
            record.created_by,
            created_at,
        ),
    )
    return MovementRecord(
        id=int(cur.lastrowid),
        employee_code=record.employee_code,
        employee_name=record.employee_name,
        store_id=record.store_id,
        movement_type=record.movement_type,
        movement_date=record.movement_date,
        old_value=record.old_value,
        new_value=record.new_value,
        notes=record.notes,
        created_by=record.created_by,
        created_at=created_at,
    )


def list_movements(employee_code: Optional[str] = None, store_id: Optional[str] = None) -> List[MovementRecord]:
    clauses: List[str] = []
    params: List[Any] = []
    if employee_code is not None:
        clauses.append("employee_code = ?")
        params.append(employee_code)
    if store_id is not None:
        clauses.append("store_id = ?")
        params.append(store_id)
    where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
    rows = db.query_all(_SELECT + where + " ORDER BY employee_code, movement_date, id", params)
    return [_from_row(row) for row in rows]


def next_later(employee_code: str, movement_date: str, movement_types: Iterable[str]) -> Optional[MovementRecord]:
    """Earliest movement of *movement_types* dated strictly after *movement_date*."""
    types = sorted(set(movement_types))
    placeholders = ", ".join("?" for _ in types)
    row = db.query_one(
        _SELECT + f" WHERE employee_code = ? AND movement_date > ? AND movement_type IN ({placeholders}) "
        "ORDER BY movement_date, id LIMIT 1",
        (employee_code, movement_date, *types),
    )
    return _from_row(row) if row else None
