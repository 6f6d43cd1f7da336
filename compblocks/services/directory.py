"""Single "as-of" read contract over the employee directory.

Old/new values of a movement are resolved here for every movement type and
for both the global and the store-scoped promotion batches.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..dao import employees_dao, snapshots_dao
from ..domain import positions
from ..domain.months import next_month


@dataclass
class EmployeeState:
    employee_code: str
    employee_name: Optional[str] = None
    store_id: Optional[str] = None
    position: Optional[str] = None
    employment_status: Optional[str] = None
    employment_type: Optional[str] = None
    is_pharmacist: bool = False
    source: str = "none"  # master | snapshot | none


def current_state(
    employee_code: str,
    *,
    store_id: Optional[str] = None,
    as_of: Optional[str] = None,
) -> EmployeeState:
    """Return the employee's state from the master record.

    Without an active master row the most recent snapshot on or before
    *as_of* (``YYYY-MM``, any month when omitted) is used instead.
    """
    master = employees_dao.get_employee(employee_code, store_id=store_id)
    if master is not None:
        return EmployeeState(
            employee_code=employee_code,
            employee_name=master.employee_name,
            store_id=master.store_id,
            position=master.current_position,
            employment_status=master.employment_status,
            employment_type=master.employment_type,
            is_pharmacist=master.is_pharmacist,
            source="master",
        )

    if as_of is not None:
        snapshot = snapshots_dao.latest_before(employee_code, next_month(as_of))
    else:
        months = snapshots_dao.list_employee_months(employee_code)
        snapshot = months[-1] if months else None
    if snapshot is not None and (store_id is None or snapshot.store_id == store_id):
        return EmployeeState(
            employee_code=employee_code,
            employee_name=snapshot.employee_name,
            store_id=snapshot.store_id,
            position=snapshot.position,
            employment_status=snapshot.employment_status,
            employment_type=snapshot.employment_type,
            is_pharmacist=snapshot.is_pharmacist,
            source="snapshot",
        )
    return EmployeeState(employee_code=employee_code)


def transition_values(
    movement_type: str,
    state: EmployeeState,
    requested_position: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(old_value, new_value)`` for a movement of *movement_type*."""
    if movement_type == positions.PROMOTION:
        return state.position, requested_position
    if movement_type == positions.LEAVE_WITHOUT_PAY:
        return state.employment_status or positions.ACTIVE, positions.LEAVE_WITHOUT_PAY
    if movement_type == positions.RETURN_TO_WORK:
        return state.employment_status or positions.LEAVE_WITHOUT_PAY, positions.ACTIVE
    if movement_type == positions.RESIGNATION:
        return state.employment_status or positions.ACTIVE, positions.RESIGNED
    if movement_type == positions.PASS_PROBATION:
        return state.position, state.position
    raise ValueError(f"Unknown movement type: {movement_type}")
