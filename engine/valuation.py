"""
Per-step valuation — one account, one simulated day.

Accounts are valued in two buckets: independent accounts first, then
share-price accounts, each in declared order. Share-price sources must be
independent members of the same group, so a single ordered pass always sees a
source's value for the day before its dependants need it.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections import defaultdict
from typing import DefaultDict, List, Optional, Sequence, Tuple

from accounts.models import Account
from core.errors import DependencyError
from core.utils import daily_growth_factor

from .schedule import set_next_date

logger = logging.getLogger(__name__)

Transfers = DefaultDict[Account, float]


def order_accounts(accounts: Sequence[Account]) -> List[Account]:
    """
    Return accounts in evaluation order, rejecting share-price links that a
    single pass cannot satisfy (source missing, self-reference, chains, cycles).
    """
    members = {id(a) for a in accounts}
    independent: List[Account] = []
    dependent: List[Account] = []

    for a in accounts:
        if a.share_price is None:
            independent.append(a)
            continue

        source = a.share_price
        entity = f"account {a.name!r}"
        if source is a:
            raise DependencyError("share_price refers to the account itself", entity=entity)
        if id(source) not in members:
            raise DependencyError(
                f"share_price source {source.name!r} is not in the simulated group",
                entity=entity,
            )
        if source.share_price is not None:
            raise DependencyError(
                f"share_price source {source.name!r} is itself a share-price account",
                entity=entity,
            )
        dependent.append(a)

    return independent + dependent


def get_next_value(
    date: dt.date,
    account: Account,
    previous_value: float,
    share_price: Optional[float] = None,
    *,
    days_per_year: float = 365.0,
) -> Tuple[float, Transfers]:
    """
    Value of `account` on `date` given yesterday's value.

    Parameters
    ----------
    date : datetime.date
        Day being simulated
    account : Account
    previous_value : float
        Account value on the previous day
    share_price : float, optional
        Today's value of the account's share-price source
    days_per_year : float
        Compounding denominator for the daily growth factor

    Returns
    -------
    (next_value, transfers)
    transfers maps target Account -> signed amount to add to it today.
    Every update firing on `date` is rescheduled as a side effect.
    """
    if account.growth_rate != 0.0:
        next_value = previous_value * daily_growth_factor(account.growth_rate, days_per_year)
    elif account.share_price is not None:
        if share_price is None:
            raise DependencyError(
                f"no value for share_price source {account.share_price.name!r} on {date}",
                entity=f"account {account.name!r}",
            )
        next_value = account.derived_value(share_price)
    else:
        next_value = previous_value

    next_transfers: Transfers = defaultdict(float)

    for update in account.updates:
        if update.next_date != date:
            continue
        next_value += update.value_change
        if update.target_account is not None:
            next_transfers[update.target_account] -= update.value_change
        logger.debug("%s: %s fired on %s", account.name, update, date)
        set_next_date(update, date)

    return next_value, next_transfers
