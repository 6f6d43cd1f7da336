"""Validate, de-duplicate and record movement batches.

Rows are handled one by one in array order. Each accepted row is written to
the history and propagated inside its own transaction, so a failing row
never undoes the rows accepted before it.
"""
from __future__ import annotations

import sqlite3
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from flask import current_app

from ..dao import db, movements_dao
from ..domain import positions
from ..domain.models import BatchResult, MovementInput, MovementRecord, RowError
from ..domain.months import month_of, parse_date
from ..logging_utils import get_logger
from . import directory, propagation

logger = get_logger(__name__)

BatchRow = Union[MovementInput, Dict[str, Any]]


def _as_input(row: BatchRow, movement_type: Optional[str] = None) -> MovementInput:
    if isinstance(row, MovementInput):
        return row
    if isinstance(row, dict):
        return MovementInput.from_payload(row, movement_type=movement_type)
    return MovementInput(movement_type=movement_type or "")


def validate(item: MovementInput) -> Tuple[Optional[date], Optional[str]]:
    """Return ``(movement_date, None)`` for an acceptable *item*, else ``(None, message)``."""
    if not (item.employee_code and item.employee_name and item.movement_type and item.effective_date):
        return None, f"employee {item.employee_code or item.employee_name or '?'}: incomplete movement data"
    if item.movement_type not in positions.MOVEMENT_TYPES:
        return None, f"employee {item.employee_code}: unknown movement type '{item.movement_type}'"
    if item.movement_type == positions.PROMOTION and not item.position:
        return None, f"employee {item.employee_code}: promotion requires a position"
    movement_date = parse_date(item.effective_date)
    if movement_date is None:
        return None, f"employee {item.employee_code}: invalid effective_date '{item.effective_date}'"
    return movement_date, None


def _sort_enabled() -> bool:
    settings = current_app.config.get("ENGINE_SETTINGS") or {}
    return bool(settings.get("movements", {}).get("sort_by_effective_date", False))


def _ordered(items: List[MovementInput], sort_by_date: bool) -> List[Tuple[int, MovementInput]]:
    indexed = list(enumerate(items))
    if not sort_by_date:
        return indexed
    return sorted(indexed, key=lambda pair: parse_date(pair[1].effective_date) or date.max)


def _build_record(
    item: MovementInput,
    movement_date: date,
    *,
    created_by: Optional[str],
    store_id: Optional[str],
) -> MovementRecord:
    state = directory.current_state(item.employee_code, store_id=store_id, as_of=month_of(movement_date))
    requested = positions.resolve_position(item.position) if item.movement_type == positions.PROMOTION else None
    if requested is not None and requested not in positions.POSITION_LABELS:
        logger.warning("Position '%s' for %s is not a known position code", requested, item.employee_code)
    old_value, new_value = directory.transition_values(item.movement_type, state, requested)
    return MovementRecord(
        employee_code=item.employee_code,
        employee_name=item.employee_name,
        store_id=store_id or state.store_id,
        movement_type=item.movement_type,
        movement_date=movement_date.isoformat(),
        old_value=old_value,
        new_value=new_value,
        notes=item.notes,
        created_by=created_by,
    )


def _insert_new(candidate: MovementRecord) -> Optional[MovementRecord]:
    """Insert *candidate*; ``None`` when the same movement was recorded meanwhile."""
    try:
        return movements_dao.insert(candidate)
    except sqlite3.IntegrityError:
        return None


def record(
    batch: Iterable[BatchRow],
    *,
    created_by: Optional[str] = None,
    store_id: Optional[str] = None,
    movement_type: Optional[str] = None,
    sort_by_date: Optional[bool] = None,
) -> BatchResult:
    """Record a batch of movements and propagate the accepted ones.

    Args:
        batch: movement rows (``MovementInput`` or request dicts)
        created_by: id of the pre-authorized caller
        store_id: restricts old-value lookup to one store and stamps the records
        movement_type: forces the type of every row (promotion batches)
        sort_by_date: apply rows sorted by effective_date; defaults to the
            ``movements.sort_by_effective_date`` setting

    Returns:
        BatchResult with created/skipped counts and per-row errors
    """
    items = [_as_input(row, movement_type) for row in batch]
    if sort_by_date is None:
        sort_by_date = _sort_enabled()
    result = BatchResult()

    for index, item in _ordered(items, sort_by_date):
        movement_date, error = validate(item)
        if movement_date is None:
            logger.info("Row %d rejected: %s", index, error)
            result.errors.append(RowError(index, item.employee_code, error or "invalid movement"))
            continue

        candidate = _build_record(item, movement_date, created_by=created_by, store_id=store_id)
        if movements_dao.exists(candidate.employee_code, candidate.movement_date, candidate.movement_type):
            logger.info(
                "Row %d skipped: %s %s on %s already recorded",
                index,
                candidate.employee_code,
                candidate.movement_type,
                candidate.movement_date,
            )
            result.skipped += 1
            continue

        try:
            with db.transaction():
                saved = _insert_new(candidate)
                if saved is None:
                    result.skipped += 1
                    continue
                propagation.apply(saved)
        except (db.DatabaseError, sqlite3.Error) as exc:
            logger.error("Row %d (%s) failed: %s", index, candidate.employee_code, exc)
            result.errors.append(RowError(index, candidate.employee_code, f"storage error: {exc}"))
            continue

        result.created += 1
        result.records.append(saved)

    logger.info(
        "Movement batch done: created=%d skipped=%d errors=%d",
        result.created,
        result.skipped,
        len(result.errors),
    )
    return result


def record_promotions(
    batch: Iterable[BatchRow],
    *,
    created_by: Optional[str] = None,
    store_id: Optional[str] = None,
) -> BatchResult:
    """Promotion-only batch; *store_id* selects the store-scoped variant."""
    return record(batch, created_by=created_by, store_id=store_id, movement_type=positions.PROMOTION)
