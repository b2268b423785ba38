from __future__ import annotations

from typing import Dict, Literal, Tuple

# Recurrence keywords accepted on an update rule.
RECURRENCES: Tuple[str, ...] = (
    "once",
    "daily",
    "weekly",
    "biweekly",
    "monthly",
    "yearly",
)

Recurrence = Literal["once", "daily", "weekly", "biweekly", "monthly", "yearly"]

# Recurrences whose `day` is a weekday (ISO numbering, Monday=1 .. Sunday=7).
WEEKDAY_RECURRENCES: Tuple[str, ...] = ("weekly", "biweekly")

# Valid `day` ranges for recurrences that take an integer day.
DAY_RANGES: Dict[str, Tuple[int, int]] = {
    "weekly": (1, 7),
    "biweekly": (1, 7),
    "monthly": (1, 31),
    "yearly": (1, 366),
}

WEEKDAY_NAMES: Dict[str, int] = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
    "sunday": 7,
}

DATE_COLUMN = "date"
TOTAL_COLUMN = "total"

# Account names that would collide with trajectory table columns.
RESERVED_ACCOUNT_NAMES: Tuple[str, ...] = (DATE_COLUMN, TOTAL_COLUMN)
