"""Domain objects for the compensation block engine."""

from .blocks import classify
from .models import BatchResult, EmployeeMaster, MonthlySnapshot, MovementInput, MovementRecord, RowError
from .stages import stage

__all__ = [
    "BatchResult",
    "EmployeeMaster",
    "MonthlySnapshot",
    "MovementInput",
    "MovementRecord",
    "RowError",
    "classify",
    "stage",
]
