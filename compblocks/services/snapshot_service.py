"""Monthly snapshot maintenance: manual edits, confirmation, export."""
from __future__ import annotations

import csv
from io import StringIO
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app

from ..dao import db, snapshots_dao
from ..domain import positions
from ..domain.blocks import block_label
from ..domain.models import MonthlySnapshot
from ..domain.months import parse_month
from ..logging_utils import get_logger
from . import propagation

logger = get_logger(__name__)


class ValidationError(ValueError):
    """Raised when a manual snapshot edit carries an invalid value."""


class SnapshotLockedError(RuntimeError):
    """Raised when a confirmed snapshot would be edited or deleted."""


class SnapshotNotFoundError(LookupError):
    """Raised when no snapshot exists for the requested employee/month."""


_BOOL_FIELDS = ("is_pharmacist", "is_dual_position", "is_supervisor_rotation")
_NUMBER_FIELDS = ("work_days", "work_hours")


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _as_number(name: str, value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be a number") from exc
    if number < 0:
        raise ValidationError(f"{name} must not be negative")
    return number


def check_choice(name: str, value: Any, choices: set[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    if not isinstance(value, str) or value not in choices:
        raise ValidationError(f"{name} must be one of {sorted(choices)}")
    return value


def _apply_payload(snapshot: MonthlySnapshot, payload: Dict[str, Any]) -> MonthlySnapshot:
    changes: Dict[str, Any] = {}
    for name in ("employee_name", "store_id"):
        if name in payload:
            changes[name] = (str(payload[name]).strip() or None) if payload[name] is not None else None
    if "position" in payload:
        changes["position"] = positions.resolve_position(payload["position"])
    if "employment_type" in payload:
        changes["employment_type"] = check_choice(
            "employment_type", payload["employment_type"], positions.EMPLOYMENT_TYPES
        )
    if "monthly_status" in payload:
        changes["monthly_status"] = check_choice(
            "monthly_status", payload["monthly_status"], positions.MONTHLY_STATUSES
        )
    if "employment_status" in payload:
        changes["employment_status"] = check_choice(
            "employment_status", payload["employment_status"], positions.EMPLOYMENT_STATUSES
        )
    for name in _BOOL_FIELDS:
        if name in payload:
            changes[name] = as_bool(payload[name])
    for name in _NUMBER_FIELDS:
        if name in payload:
            changes[name] = _as_number(name, payload[name])
    if "newbie_level" in payload:
        changes["newbie_level"] = positions.resolve_newbie_level(payload["newbie_level"])
    if "extra_tasks" in payload:
        changes["extra_tasks"] = positions.resolve_extra_tasks(payload["extra_tasks"])

    for name, value in changes.items():
        setattr(snapshot, name, value)
    return snapshot


def save_snapshot(employee_code: str, year_month: str, payload: Dict[str, Any]) -> MonthlySnapshot:
    """Create or edit a snapshot by hand; confirmed snapshots are read-only."""
    employee_code = employee_code.strip().upper()
    year_month = parse_month(year_month)
    existing = snapshots_dao.get_snapshot(employee_code, year_month)
    if existing is not None and existing.is_confirmed:
        raise SnapshotLockedError(f"Snapshot {employee_code}/{year_month} is confirmed")
    base = existing or MonthlySnapshot(employee_code=employee_code, year_month=year_month)
    saved = propagation.write(_apply_payload(base, payload))
    logger.info("Saved snapshot %s/%s (block %d)", employee_code, year_month, saved.block)
    return saved


def get_snapshot(employee_code: str, year_month: str) -> MonthlySnapshot:
    snapshot = snapshots_dao.get_snapshot(employee_code.strip().upper(), parse_month(year_month))
    if snapshot is None:
        raise SnapshotNotFoundError(f"No snapshot for {employee_code}/{year_month}")
    return snapshot


def delete_snapshot(employee_code: str, year_month: str) -> None:
    snapshot = get_snapshot(employee_code, year_month)
    if snapshot.is_confirmed:
        raise SnapshotLockedError(f"Snapshot {snapshot.employee_code}/{snapshot.year_month} is confirmed")
    snapshots_dao.delete_snapshot(snapshot.employee_code, snapshot.year_month)


def confirm_month(year_month: str, store_id: Optional[str] = None) -> int:
    count = snapshots_dao.confirm_month(parse_month(year_month), store_id)
    logger.info("Confirmed %d snapshots for %s (store=%s)", count, year_month, store_id)
    return count


def reclassify_month(year_month: str) -> int:
    """Recompute cached block/stage for a month; returns rows that changed."""
    changed = 0
    with db.transaction():
        for snapshot in snapshots_dao.list_month(parse_month(year_month)):
            refreshed = propagation.refresh(snapshot)
            if (refreshed.block, refreshed.stage) != (snapshot.block, snapshot.stage):
                snapshots_dao.upsert_snapshot(refreshed)
                changed += 1
    return changed


def month_rows(year_month: str, store_id: Optional[str] = None) -> List[Dict[str, Any]]:
    rows = []
    for snapshot in snapshots_dao.list_month(parse_month(year_month), store_id):
        row = snapshot.to_dict()
        row["block_label"] = block_label(snapshot.block)
        row["position_label"] = positions.position_label(snapshot.position)
        rows.append(row)
    return rows


def export_month_csv(year_month: str, store_id: Optional[str] = None) -> Tuple[StringIO, str]:
    year_month = parse_month(year_month)
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(["store_id", "month", "employee_code", "employee_name", "block", "position", "stage", "hours", "days"])
    for snapshot in snapshots_dao.list_month(year_month, store_id):
        # days only matter when the month was not worked in full
        days = "" if snapshot.monthly_status == positions.FULL_MONTH else _fmt(snapshot.work_days)
        writer.writerow(
            [
                snapshot.store_id or "",
                year_month,
                snapshot.employee_code,
                snapshot.employee_name or "",
                snapshot.block,
                positions.position_label(snapshot.position),
                snapshot.stage,
                _fmt(snapshot.work_hours),
                days,
            ]
        )
    buffer.seek(0)
    settings = current_app.config.get("ENGINE_SETTINGS") or {}
    pattern = settings.get("export", {}).get("filename_pattern", "monthly_staff_status_{month}.csv")
    return buffer, pattern.format(month=year_month)


def _fmt(value: Optional[float]) -> str:
    if value is None:
        return ""
    return str(int(value)) if float(value).is_integer() else str(value)
