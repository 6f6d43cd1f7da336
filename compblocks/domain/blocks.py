"""Calculation block classification for monthly snapshots.

The block code is consumed by the bonus formula as an opaque input. Rules
are evaluated in business precedence order and the first match wins, so
the order of ``_RULES`` must not change.
"""
from __future__ import annotations

from typing import Callable, List, Tuple

from .models import MonthlySnapshot
from .positions import (
    ACTING_STORE_MANAGER,
    FULL_MONTH,
    FULL_TIME,
    PART_TIME,
    SPECIAL_HOURS_TASKS,
    STORE_MANAGER,
    SUPERVISOR,
    position_tags,
)

__all__ = ["BLOCK_LABELS", "classify", "block_label"]

BLOCK_LABELS = {
    0: "unclassified",
    1: "full-time, full month",
    2: "supervisor rotation",
    3: "full-time, partial month or dual-role manager",
    4: "special hours",
    5: "part-time pharmacist",
    6: "part-time staff",
}

Rule = Callable[[MonthlySnapshot], bool]


def _supervisor_rotation(s: MonthlySnapshot) -> bool:
    # bonus is forced to zero downstream
    return bool(s.is_supervisor_rotation)


def _part_time_general(s: MonthlySnapshot) -> bool:
    return s.employment_type == PART_TIME and not s.is_pharmacist


def _part_time_pharmacist(s: MonthlySnapshot) -> bool:
    return s.employment_type == PART_TIME and bool(s.is_pharmacist)


def _special_hours(s: MonthlySnapshot) -> bool:
    tags = position_tags(s.position)
    if {SUPERVISOR, ACTING_STORE_MANAGER} <= tags and s.is_dual_position:
        return True
    return any(task in SPECIAL_HOURS_TASKS for task in s.extra_tasks or ())


def _full_time_partial_month(s: MonthlySnapshot) -> bool:
    return s.employment_type == FULL_TIME and s.monthly_status != FULL_MONTH


def _dual_role_manager(s: MonthlySnapshot) -> bool:
    # independent of the monthly status: full-month dual managers still land here
    return bool(s.is_dual_position) and bool(position_tags(s.position) & {STORE_MANAGER, ACTING_STORE_MANAGER})


def _full_time_full_month(s: MonthlySnapshot) -> bool:
    return s.employment_type == FULL_TIME and s.monthly_status == FULL_MONTH


_RULES: List[Tuple[Rule, int]] = [
    (_supervisor_rotation, 2),
    (_part_time_general, 6),
    (_part_time_pharmacist, 5),
    (_special_hours, 4),
    (_full_time_partial_month, 3),
    (_dual_role_manager, 3),
    (_full_time_full_month, 1),
]


def block_label(block: int) -> str:
    return BLOCK_LABELS.get(block, BLOCK_LABELS[0])


def classify(snapshot: MonthlySnapshot) -> Tuple[int, str]:
    """Return ``(block, label)`` for *snapshot*. Block 0 is the fallback."""

    for rule, block in _RULES:
        if rule(snapshot):
            return block, BLOCK_LABELS[block]
    return 0, BLOCK_LABELS[0]
