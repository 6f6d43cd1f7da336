"""Canonical position, level and status vocabulary for the block engine."""
from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional, Set

__all__ = [
    "SUPERVISOR",
    "STORE_MANAGER",
    "ACTING_STORE_MANAGER",
    "POSITION_LABELS",
    "SENIOR_POSITIONS",
    "NEWBIE_LEVELS",
    "SPECIAL_HOURS_TASKS",
    "EMPLOYMENT_TYPES",
    "EMPLOYMENT_STATUSES",
    "MONTHLY_STATUSES",
    "MOVEMENT_TYPES",
    "STATUS_MOVEMENTS",
    "FULL_TIME",
    "PART_TIME",
    "ACTIVE",
    "LEAVE_WITHOUT_PAY",
    "RESIGNED",
    "FULL_MONTH",
    "RETURN_TO_WORK",
    "PROMOTION",
    "PASS_PROBATION",
    "RESIGNATION",
    "resolve_position",
    "position_tags",
    "position_label",
    "resolve_newbie_level",
    "resolve_extra_tasks",
]

# Role tags consumed by the block classifier
SUPERVISOR = "SUPERVISOR"
STORE_MANAGER = "STORE_MANAGER"
ACTING_STORE_MANAGER = "ACTING_STORE_MANAGER"

FULL_TIME = "full_time"
PART_TIME = "part_time"
EMPLOYMENT_TYPES: Set[str] = {FULL_TIME, PART_TIME}

ACTIVE = "active"
LEAVE_WITHOUT_PAY = "leave_without_pay"
RESIGNED = "resigned"
EMPLOYMENT_STATUSES: Set[str] = {ACTIVE, LEAVE_WITHOUT_PAY, RESIGNED}

FULL_MONTH = "full_month"
RETURN_TO_WORK = "return_to_work"
MONTHLY_STATUSES: Set[str] = {
    FULL_MONTH,
    "partial_month",
    "new_hire",
    "transferred",
    LEAVE_WITHOUT_PAY,
    RETURN_TO_WORK,
    RESIGNED,
}

PROMOTION = "promotion"
PASS_PROBATION = "pass_probation"
RESIGNATION = "resignation"
MOVEMENT_TYPES: Set[str] = {PROMOTION, LEAVE_WITHOUT_PAY, RETURN_TO_WORK, PASS_PROBATION, RESIGNATION}
STATUS_MOVEMENTS: Set[str] = {LEAVE_WITHOUT_PAY, RETURN_TO_WORK, RESIGNATION}

# code -> (english label, legacy label)
POSITION_LABELS: Dict[str, tuple[str, str]] = {
    "supervisor": ("supervisor", "督導"),
    "store_manager": ("store manager", "店長"),
    "acting_store_manager": ("acting store manager", "代理店長"),
    "supervisor_acting_store_manager": ("supervisor(acting store manager)", "督導(代理店長)"),
    "assistant_manager": ("assistant manager", "副店長"),
    "section_chief": ("section chief", "主任"),
    "team_lead": ("team lead", "組長"),
    "specialist": ("specialist", "專員"),
    "newbie": ("newbie", "新人"),
    "admin": ("admin", "行政"),
    "part_time_specialist": ("part-time specialist", "兼職專員"),
    "part_time_pharmacist": ("part-time pharmacist", "兼職藥師"),
    "part_time_pharmacist_specialist": ("part-time pharmacist specialist", "兼職藥師專員"),
    "part_time_assistant": ("part-time assistant", "兼職助理"),
}

_POSITION_TAGS: Dict[str, FrozenSet[str]] = {
    "supervisor": frozenset({SUPERVISOR}),
    "store_manager": frozenset({STORE_MANAGER}),
    "acting_store_manager": frozenset({ACTING_STORE_MANAGER}),
    "supervisor_acting_store_manager": frozenset({SUPERVISOR, ACTING_STORE_MANAGER}),
}

SENIOR_POSITIONS: Set[str] = {
    "supervisor",
    "store_manager",
    "acting_store_manager",
    "supervisor_acting_store_manager",
    "assistant_manager",
    "section_chief",
    "team_lead",
    "specialist",
}

NEWBIE_LEVELS: Dict[str, tuple[str, ...]] = {
    "newbie_tier_1": ("one-tier newbie", "一階新人"),
    "newbie_tier_2": ("two-tier newbie", "二階新人"),
    "newbie_untiered": ("untiered newbie", "未過階新人"),
    "admin_passed": ("passed-admin", "過階行政"),
    "admin_not_passed": ("not-passed-admin", "未過階行政"),
}

SPECIAL_HOURS_TASKS: Dict[str, tuple[str, ...]] = {
    "long_term_care_outreach": ("long-term care outreach", "長照外務"),
    "clinic_business": ("clinic business", "診所業務"),
}


def _normalize(value: Optional[str]) -> str:
    text = (value or "").strip().lower()
    text = text.replace("（", "(").replace("）", ")").replace("_", " ").replace("-", " ")
    text = " ".join(text.split())
    return text.replace(" (", "(").replace("( ", "(").replace(" )", ")")


def _alias_index(table: Dict[str, tuple[str, ...]]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for code, aliases in table.items():
        for alias in (code, *aliases):
            index[_normalize(alias)] = code
    return index


_POSITION_INDEX = _alias_index(POSITION_LABELS)
_LEVEL_INDEX = _alias_index(NEWBIE_LEVELS)
_TASK_INDEX = _alias_index(SPECIAL_HOURS_TASKS)


def resolve_position(raw: Optional[str]) -> Optional[str]:
    """Return the canonical code for *raw*.

    Codes, English labels and legacy labels all resolve to the same code.
    Unknown labels are returned stripped but otherwise untouched, so they
    carry no role tags.
    """

    if raw is None or not str(raw).strip():
        return None
    return _POSITION_INDEX.get(_normalize(str(raw)), str(raw).strip())


def position_tags(code: Optional[str]) -> FrozenSet[str]:
    return _POSITION_TAGS.get(code or "", frozenset())


def position_label(code: Optional[str]) -> str:
    if not code:
        return ""
    labels = POSITION_LABELS.get(code)
    return labels[0] if labels else code


def resolve_newbie_level(raw: Optional[str]) -> Optional[str]:
    if raw is None or not str(raw).strip():
        return None
    return _LEVEL_INDEX.get(_normalize(str(raw)), str(raw).strip())


def resolve_extra_tasks(raw: Optional[Iterable[str]]) -> tuple[str, ...]:
    if not raw:
        return ()
    if isinstance(raw, str):
        raw = [raw]
    seen: list[str] = []
    for item in raw:
        if item is None or not str(item).strip():
            continue
        code = _TASK_INDEX.get(_normalize(str(item)), str(item).strip())
        if code not in seen:
            seen.append(code)
    return tuple(seen)
