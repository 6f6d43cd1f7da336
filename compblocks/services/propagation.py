"""Apply recorded movements to the monthly snapshot timeline.

Every write is a plain "set field" followed by a recompute of the cached
block/stage, so applying the same movement twice leaves the same state.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import List, Optional

from ..dao import db, employees_dao, movements_dao, snapshots_dao
from ..domain import positions
from ..domain.blocks import classify
from ..domain.models import MonthlySnapshot, MovementRecord
from ..domain.months import month_of, next_month
from ..domain.stages import stage
from ..logging_utils import get_logger

logger = get_logger(__name__)

# monthly_status written on the effective month of a status movement
STATUS_MONTHLY: dict[str, str] = {
    positions.LEAVE_WITHOUT_PAY: positions.LEAVE_WITHOUT_PAY,
    positions.RETURN_TO_WORK: positions.RETURN_TO_WORK,
    positions.RESIGNATION: positions.RESIGNED,
}


def refresh(snapshot: MonthlySnapshot) -> MonthlySnapshot:
    """Return *snapshot* with ``block`` and ``stage`` recomputed."""
    block, _ = classify(snapshot)
    return replace(snapshot, block=block, stage=stage(snapshot.position, snapshot.newbie_level))


def write(snapshot: MonthlySnapshot) -> MonthlySnapshot:
    refreshed = refresh(snapshot)
    snapshots_dao.upsert_snapshot(refreshed)
    return refreshed


def _movement_month(movement: MovementRecord) -> str:
    return month_of(date.fromisoformat(movement.movement_date))


def carry_forward(
    employee_code: str,
    year_month: str,
    *,
    employee_name: Optional[str] = None,
    store_id: Optional[str] = None,
) -> MonthlySnapshot:
    """Build (without saving) a minimal snapshot for a month that has none.

    Attributes come from the closest earlier snapshot, else from the master
    record. With neither the snapshot stays bare and needs manual completion.
    Employment status is never carried: it belongs to the month a status
    movement names.
    """
    prior = snapshots_dao.latest_before(employee_code, year_month)
    if prior is not None:
        return MonthlySnapshot(
            employee_code=employee_code,
            year_month=year_month,
            employee_name=prior.employee_name or employee_name,
            store_id=prior.store_id or store_id,
            position=prior.position,
            employment_type=prior.employment_type,
            is_pharmacist=prior.is_pharmacist,
            newbie_level=prior.newbie_level,
        )

    master = employees_dao.get_employee(employee_code)
    if master is not None:
        return MonthlySnapshot(
            employee_code=employee_code,
            year_month=year_month,
            employee_name=master.employee_name,
            store_id=master.store_id,
            position=master.current_position,
            employment_type=master.employment_type,
            is_pharmacist=master.is_pharmacist,
        )

    logger.warning("No prior data for %s, creating bare snapshot for %s", employee_code, year_month)
    return MonthlySnapshot(
        employee_code=employee_code,
        year_month=year_month,
        employee_name=employee_name,
        store_id=store_id,
    )


def _load_or_create(movement: MovementRecord, year_month: str) -> MonthlySnapshot:
    snapshot = snapshots_dao.get_snapshot(movement.employee_code, year_month)
    if snapshot is not None:
        return snapshot
    logger.info("Creating snapshot %s/%s from carry-forward", movement.employee_code, year_month)
    return carry_forward(
        movement.employee_code,
        year_month,
        employee_name=movement.employee_name,
        store_id=movement.store_id,
    )


def _apply_promotion(movement: MovementRecord) -> List[str]:
    effective = _movement_month(movement)
    later = movements_dao.next_later(movement.employee_code, movement.movement_date, {positions.PROMOTION})
    boundary = _movement_month(later) if later else None
    touched: List[str] = []

    if boundary is not None and boundary <= effective:
        # a later promotion in the same month owns it
        return touched

    snapshot = _load_or_create(movement, effective)
    write(replace(snapshot, position=movement.new_value))
    touched.append(effective)

    for snapshot in snapshots_dao.list_employee_months(movement.employee_code, from_month=next_month(effective)):
        if boundary is not None and snapshot.year_month >= boundary:
            break
        write(replace(snapshot, position=movement.new_value))
        touched.append(snapshot.year_month)

    if later is None:
        employees_dao.update_current_position(movement.employee_code, movement.new_value)
    return touched


def _apply_status(movement: MovementRecord) -> List[str]:
    effective = _movement_month(movement)
    later = movements_dao.next_later(movement.employee_code, movement.movement_date, positions.STATUS_MOVEMENTS)
    touched: List[str] = []

    if later is None or _movement_month(later) != effective:
        snapshot = _load_or_create(movement, effective)
        write(
            replace(
                snapshot,
                employment_status=movement.new_value,
                monthly_status=STATUS_MONTHLY[movement.movement_type],
            )
        )
        touched.append(effective)

    if later is None and movement.new_value:
        employees_dao.update_employment_status(movement.employee_code, movement.new_value)
    return touched


def apply(movement: MovementRecord) -> List[str]:
    """Apply *movement* to the timeline; returns the months written."""
    if movement.movement_type == positions.PROMOTION:
        touched = _apply_promotion(movement)
    elif movement.movement_type in positions.STATUS_MOVEMENTS:
        touched = _apply_status(movement)
    else:
        # pass_probation is history only
        touched = []
    logger.debug(
        "Applied %s for %s on %s: months=%s",
        movement.movement_type,
        movement.employee_code,
        movement.movement_date,
        touched,
    )
    return touched


def replay(employee_code: str) -> int:
    """Re-apply every recorded movement of an employee in date order."""
    movements = movements_dao.list_movements(employee_code=employee_code)
    with db.transaction():
        for movement in movements:
            apply(movement)
    logger.info("Replayed %d movements for %s", len(movements), employee_code)
    return len(movements)
