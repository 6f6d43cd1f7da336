"""Domain dataclasses for the compensation block engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class EmployeeMaster:
    employee_code: str
    employee_name: str
    store_id: Optional[str] = None
    employment_type: Optional[str] = None
    is_pharmacist: bool = False
    current_position: Optional[str] = None
    employment_status: str = "active"
    is_active: bool = True


@dataclass
class MonthlySnapshot:
    """One employee's attributes for one ``YYYY-MM`` month.

    ``block`` and ``stage`` are caches derived from the other fields and are
    recomputed on every write.
    """

    employee_code: str
    year_month: str
    employee_name: Optional[str] = None
    store_id: Optional[str] = None
    position: Optional[str] = None
    employment_type: Optional[str] = None
    is_pharmacist: bool = False
    monthly_status: Optional[str] = None
    employment_status: Optional[str] = None
    work_days: Optional[float] = None
    work_hours: Optional[float] = None
    is_dual_position: bool = False
    is_supervisor_rotation: bool = False
    newbie_level: Optional[str] = None
    extra_tasks: Tuple[str, ...] = ()
    block: int = 0
    stage: str = ""
    is_confirmed: bool = False
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_code": self.employee_code,
            "year_month": self.year_month,
            "employee_name": self.employee_name,
            "store_id": self.store_id,
            "position": self.position,
            "employment_type": self.employment_type,
            "is_pharmacist": self.is_pharmacist,
            "monthly_status": self.monthly_status,
            "employment_status": self.employment_status,
            "work_days": self.work_days,
            "work_hours": self.work_hours,
            "is_dual_position": self.is_dual_position,
            "is_supervisor_rotation": self.is_supervisor_rotation,
            "newbie_level": self.newbie_level,
            "extra_tasks": list(self.extra_tasks),
            "block": self.block,
            "stage": self.stage,
            "is_confirmed": self.is_confirmed,
        }


@dataclass
class MovementInput:
    employee_code: str = ""
    employee_name: str = ""
    movement_type: str = ""
    effective_date: str = ""
    position: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], *, movement_type: Optional[str] = None) -> "MovementInput":
        def text(key: str) -> str:
            value = payload.get(key)
            return str(value).strip() if value is not None else ""

        return cls(
            employee_code=text("employee_code").upper(),
            employee_name=text("employee_name"),
            movement_type=movement_type or text("movement_type"),
            effective_date=text("effective_date"),
            position=text("position") or None,
            notes=text("notes") or None,
        )


@dataclass(frozen=True)
class MovementRecord:
    """Immutable entry of the movement history."""

    employee_code: str
    movement_type: str
    movement_date: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    employee_name: Optional[str] = None
    store_id: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_code": self.employee_code,
            "employee_name": self.employee_name,
            "store_id": self.store_id,
            "movement_type": self.movement_type,
            "movement_date": self.movement_date,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "notes": self.notes,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }


@dataclass
class RowError:
    index: int
    employee_code: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {"index": self.index, "employee_code": self.employee_code, "error": self.error}


@dataclass
class BatchResult:
    created: int = 0
    skipped: int = 0
    errors: List[RowError] = field(default_factory=list)
    records: List[MovementRecord] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors
