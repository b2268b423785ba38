"""
Account data model.

An Account holds a starting value, an optional annual growth rate and the
AccountUpdates it owns. A "share-price" account instead derives its value from
another account each day: (source_value - strike_price) * num_shares.

Accounts compare and hash by identity so they can key per-day transfer maps
and be shared between several AccountGroups.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union

from core.errors import ConfigurationError
from core.schema import DAY_RANGES, RECURRENCES, WEEKDAY_RECURRENCES
from core.utils import parse_weekday, to_date


@dataclass(eq=False)
class AccountUpdate:
    """
    Scheduled change to the owning account's value.

    value_change is signed. `day` is the recurrence parameter: ISO weekday for
    weekly/biweekly, day-of-month for monthly, day-of-year for yearly, 0 for
    daily/once. `next_date` is the next trigger date; it is given up front for
    "once" and placed by the scheduler for everything else.

    With a target_account the owner still receives value_change and the target
    receives the opposite amount, so the pair moves value without creating it.
    """

    value_change: float
    recurrence: str
    day: int = 0
    next_date: Optional[dt.date] = None
    target_account: Optional["Account"] = None

    def __post_init__(self) -> None:
        self.value_change = float(self.value_change)
        if self.recurrence not in RECURRENCES:
            raise ConfigurationError(
                f"unknown recurrence {self.recurrence!r}; expected one of {list(RECURRENCES)}",
                entity="update",
            )
        if self.recurrence == "once":
            if self.next_date is None:
                raise ConfigurationError('recurrence "once" requires a date', entity="update")
            self.next_date = to_date(self.next_date)
        elif self.recurrence in DAY_RANGES:
            lo, hi = DAY_RANGES[self.recurrence]
            if not lo <= int(self.day) <= hi:
                raise ConfigurationError(
                    f'recurrence "{self.recurrence}" requires a day in {lo}..{hi}, got {self.day!r}',
                    entity="update",
                )
            self.day = int(self.day)

    @classmethod
    def from_day(
        cls,
        value_change: float,
        recurrence: str,
        day: Union[str, int, dt.date, None] = None,
        *,
        target_account: Optional["Account"] = None,
    ) -> "AccountUpdate":
        """
        Build an update from the raw `day` field of a system file.

        daily     -> day ignored
        once      -> literal calendar date
        weekly    -> weekday name or number
        biweekly  -> weekday name or number
        monthly   -> day of month
        yearly    -> day of year
        """
        if recurrence not in RECURRENCES or recurrence == "daily":
            return cls(value_change, recurrence, target_account=target_account)

        if day is None or (isinstance(day, str) and not day.strip()):
            raise ConfigurationError(
                f'"day" is required when recurrence is "{recurrence}"', entity="update"
            )

        try:
            if recurrence == "once":
                once_date = to_date(day)
            elif recurrence in WEEKDAY_RECURRENCES:
                parsed = parse_weekday(day)
            else:
                parsed = int(str(day).strip())
        except ValueError as exc:
            raise ConfigurationError(
                f'bad day {day!r} for recurrence "{recurrence}": {exc}', entity="update"
            ) from exc

        if recurrence == "once":
            return cls(value_change, recurrence, next_date=once_date,
                       target_account=target_account)
        return cls(value_change, recurrence, parsed, target_account=target_account)

    def __str__(self) -> str:
        day = self.next_date.isoformat() if self.recurrence == "once" else self.day
        return f"{self.value_change}, {self.recurrence}, {day}"


@dataclass(eq=False)
class Account:
    """A named value tracked over time."""

    name: str
    value: float = 0.0
    growth_rate: float = 0.0  # annual
    updates: List[AccountUpdate] = field(default_factory=list)
    share_price: Optional["Account"] = None
    num_shares: float = 0.0    # only active with share_price
    strike_price: float = 0.0  # only active with share_price

    def __post_init__(self) -> None:
        self.name = str(self.name)
        self.value = float(self.value)
        self.growth_rate = float(self.growth_rate)
        if self.share_price is not None and self.growth_rate != 0.0:
            raise ConfigurationError(
                "a share-price account cannot carry its own growth_rate",
                entity=f"account {self.name!r}",
            )

    @classmethod
    def derived(
        cls,
        name: str,
        share_price: "Account",
        num_shares: float,
        strike_price: float = 0.0,
        updates: Optional[List[AccountUpdate]] = None,
    ) -> "Account":
        """Share-price account whose starting value comes from its source."""
        value = (share_price.value - float(strike_price)) * float(num_shares)
        return cls(
            name,
            value,
            0.0,
            list(updates or []),
            share_price=share_price,
            num_shares=float(num_shares),
            strike_price=float(strike_price),
        )

    @property
    def is_dependent(self) -> bool:
        return self.share_price is not None

    def derived_value(self, source_value: float) -> float:
        return (source_value - self.strike_price) * self.num_shares

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


@dataclass(eq=False)
class AccountGroup:
    """Named, ordered set of shared Accounts."""

    name: str
    accounts: List[Account] = field(default_factory=list)

    @property
    def account_names(self) -> List[str]:
        return [a.name for a in self.accounts]

    def get(self, name: str) -> Account:
        for a in self.accounts:
            if a.name == name:
                return a
        raise KeyError(name)

    def __contains__(self, account: object) -> bool:
        return any(a is account for a in self.accounts)

    def __iter__(self) -> Iterator[Account]:
        return iter(self.accounts)

    def __len__(self) -> int:
        return len(self.accounts)

    def __str__(self) -> str:
        return f"{self.name}: {current_value(self)}"


def value_at_time(account: Account, time: float) -> float:
    """Value of an account after `time` years of compounding at its growth rate."""
    return account.value * (1.0 + account.growth_rate) ** time


def current_value(account_group: AccountGroup) -> float:
    """Sum of member account values."""
    return float(sum(a.value for a in account_group.accounts))
