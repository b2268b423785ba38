"""
Recurrence scheduler — places and advances each AccountUpdate's next trigger date.

Initial placement uses day counts relative to the target day of the period:
  weekly/biweekly: next target weekday, 0-6 days ahead
  monthly:         target day-of-month, using a fixed 30-day month when the day has passed
  yearly:          target day-of-year, using a fixed 365-day year when the day has passed
Re-firing uses exact calendar increments (+1 day, +7, +14, +1 month, +1 year).
Placement and re-firing therefore disagree for monthly and yearly updates.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable

from accounts.models import Account, AccountUpdate
from core.errors import ScheduleError
from core.schema import WEEKDAY_RECURRENCES
from core.utils import add_months, add_years, next_monthday

logger = logging.getLogger(__name__)


def init_next_date(update: AccountUpdate, date: dt.date) -> None:
    """Set the first trigger date of `update` relative to `date`."""
    recurrence = update.recurrence

    if recurrence == "once":
        # configured literal date
        return
    if recurrence == "daily":
        update.next_date = date + dt.timedelta(days=1)
    elif recurrence in WEEKDAY_RECURRENCES:
        weekday = update.day
        current = date.isoweekday()
        if current <= weekday:
            update.next_date = date + dt.timedelta(days=weekday - current)
        else:
            update.next_date = date + dt.timedelta(days=7 + weekday - current)
    elif recurrence == "monthly":
        monthday = update.day
        if date.day <= monthday:
            update.next_date = date + dt.timedelta(days=monthday - date.day)
        else:
            update.next_date = date + dt.timedelta(days=30 + monthday - date.day)
    elif recurrence == "yearly":
        yearday = update.day
        current = date.timetuple().tm_yday
        if current <= yearday:
            update.next_date = date + dt.timedelta(days=yearday - current)
        else:
            update.next_date = date + dt.timedelta(days=365 + yearday - current)
    else:
        raise ScheduleError(f"Cannot schedule recurrence {recurrence!r}.")


def set_next_date(update: AccountUpdate, date: dt.date) -> None:
    """Advance `update` after it fired on `date`. "once" is never rescheduled."""
    recurrence = update.recurrence

    if recurrence == "once":
        return
    if recurrence == "daily":
        update.next_date = date + dt.timedelta(days=1)
    elif recurrence == "weekly":
        update.next_date = date + dt.timedelta(weeks=1)
    elif recurrence == "biweekly":
        update.next_date = date + dt.timedelta(weeks=2)
    elif recurrence == "monthly":
        update.next_date = add_months(date, 1)
    elif recurrence == "yearly":
        update.next_date = add_years(date, 1)
    else:
        raise ScheduleError(f"Cannot reschedule recurrence {recurrence!r}.")


def init_schedules(accounts: Iterable[Account], start_date: dt.date) -> None:
    """
    Place every update owned by `accounts` for a simulation starting at start_date.

    The start row is the configured snapshot, so no update can fire on it: a
    recurring placement landing on or before start_date is advanced until it
    lies after it. A monthly one moves instead to the next calendar occurrence
    of its day-of-month. "once" dates are left alone and simply never match if
    they are not after start_date.
    """
    for account in accounts:
        for update in account.updates:
            init_next_date(update, start_date)
            if update.recurrence == "once":
                continue
            if update.recurrence == "monthly" and update.next_date <= start_date:
                update.next_date = next_monthday(start_date, update.day)
            while update.next_date <= start_date:
                set_next_date(update, update.next_date)
            logger.debug(
                "Scheduled %s update [%s] first on %s", account.name, update, update.next_date
            )
