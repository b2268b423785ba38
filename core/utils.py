from __future__ import annotations

import datetime as dt
from typing import Iterable, Union

import pandas as pd
from dateutil.relativedelta import relativedelta

from .schema import WEEKDAY_NAMES


def require_columns(df: pd.DataFrame, cols: Iterable[str]) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def daily_growth_factor(annual_rate: float, days_per_year: float = 365.0) -> float:
    """Convert an annual growth rate to a one-day compounding factor via (1+r)^(1/365)."""
    return (1.0 + annual_rate) ** (1.0 / days_per_year)


def to_date(value: Union[str, dt.date, pd.Timestamp]) -> dt.date:
    """Coerce an ISO string, datetime or Timestamp to a plain calendar date."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value).strip())


def parse_weekday(value: Union[str, int]) -> int:
    """
    ISO weekday number (Monday=1 .. Sunday=7) from a name, a 3-letter
    abbreviation or an integer. Raises ValueError otherwise.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a weekday: {value!r}")
    if isinstance(value, int):
        if 1 <= value <= 7:
            return value
        raise ValueError(f"Weekday number must be in 1..7, got {value}")

    text = str(value).strip().lower()
    if text.isdigit():
        return parse_weekday(int(text))
    if text in WEEKDAY_NAMES:
        return WEEKDAY_NAMES[text]
    for name, number in WEEKDAY_NAMES.items():
        if len(text) == 3 and name.startswith(text):
            return number
    raise ValueError(f"Not a weekday: {value!r}")


def add_months(date: dt.date, n: int = 1) -> dt.date:
    """Calendar-month increment; clamps to month end (Jan 31 + 1 -> Feb 28/29)."""
    return date + relativedelta(months=n)


def add_years(date: dt.date, n: int = 1) -> dt.date:
    """Calendar-year increment; Feb 29 clamps to Feb 28 in non-leap years."""
    return date + relativedelta(years=n)


def next_monthday(date: dt.date, day: int) -> dt.date:
    """First date after `date` falling on day-of-month `day`, clamped to month end."""
    candidate = date + relativedelta(day=day)
    if candidate <= date:
        candidate = date + relativedelta(months=1, day=day)
    return candidate


def simulation_days(start: dt.date, stop: dt.date) -> pd.DatetimeIndex:
    """Every calendar day from start to stop inclusive."""
    return pd.date_range(pd.Timestamp(start), pd.Timestamp(stop), freq="D")
