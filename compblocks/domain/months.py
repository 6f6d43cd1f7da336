"""Year-month helpers shared by the services."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional


class InvalidMonthFormatError(ValueError):
    """Raised when a month value is not in ``YYYY-MM`` format."""


def parse_month(value: Optional[str]) -> str:
    """Validate and normalise a YYYY-MM value."""
    if not value:
        raise InvalidMonthFormatError("Month value is required")
    try:
        parsed = datetime.strptime(str(value).strip(), "%Y-%m")
    except ValueError as exc:
        raise InvalidMonthFormatError("Month must be in YYYY-MM format") from exc
    return parsed.strftime("%Y-%m")


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO ``YYYY-MM-DD`` (or ``YYYY/MM/DD``) value, ``None`` if invalid."""
    s = (value or "").strip() if isinstance(value, str) else ""
    if not s:
        return None
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.strptime(s, "%Y/%m/%d").date()
    except ValueError:
        return None


def month_of(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def previous_month(ym: str) -> str:
    year, month = (int(part) for part in ym.split("-"))
    if month == 1:
        return f"{year - 1:04d}-12"
    return f"{year:04d}-{month - 1:02d}"


def next_month(ym: str) -> str:
    year, month = (int(part) for part in ym.split("-"))
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"
