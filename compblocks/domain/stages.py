"""Tier (stage) lookup used by the monthly export."""
from __future__ import annotations

from typing import Dict, Optional

from .positions import SENIOR_POSITIONS

TIER_3 = "tier-3"
NOT_PASSED = "not passed"

_NEWBIE_STAGES: Dict[str, str] = {
    "newbie_tier_2": "tier-2",
    "newbie_tier_1": "tier-1",
}

_PART_TIME_STAGES: Dict[str, str] = {
    "part_time_specialist": TIER_3,
    "part_time_pharmacist": NOT_PASSED,
    "part_time_pharmacist_specialist": TIER_3,
    "part_time_assistant": NOT_PASSED,
}


def stage(position: Optional[str], newbie_level: Optional[str]) -> str:
    """Return the stage label for a position code.

    An empty string means "unclassified" and is not an error.
    """

    if not position:
        return ""
    if position in SENIOR_POSITIONS:
        return TIER_3
    if position == "newbie":
        return _NEWBIE_STAGES.get(newbie_level or "", "pre-tier-1")
    if position == "admin":
        return "admin(passed)" if newbie_level == "admin_passed" else "admin(not passed)"
    return _PART_TIME_STAGES.get(position, "")
