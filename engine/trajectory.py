"""
Trajectory — day-by-day value history of one AccountGroup.

The table has one row per calendar day from start_date to stop_date inclusive:
a date column, one column per account (by name) and a total column. Row 0 is
the configured snapshot; each later row is derived from the previous one plus
that day's growth, updates and transfers.

Each run works on a private deep copy of the group's account graph, so update
schedules never leak between trajectories that share accounts.
"""

from __future__ import annotations

import copy
import datetime as dt
import enum
import logging
from collections import defaultdict
from typing import DefaultDict, Dict, Iterable, List, Optional, Union

import numpy as np
import pandas as pd

from accounts.models import Account, AccountGroup, current_value
from core.config import DEFAULT_CONFIG, SimulationConfig
from core.errors import ConfigurationError, SimulationError
from core.utils import require_columns, simulation_days, to_date

from .schedule import init_schedules
from .valuation import get_next_value, order_accounts

logger = logging.getLogger(__name__)


class TrajectoryState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    COMPLETE = "complete"


class Trajectory:
    """Value over time for all Accounts in an AccountGroup."""

    def __init__(
        self,
        name: str,
        account_group: AccountGroup,
        stop_date: Union[str, dt.date],
        *,
        start_date: Union[str, dt.date, None] = None,
        config: Optional[SimulationConfig] = None,
    ):
        self.name = str(name)
        self.account_group = account_group
        self.config = config or DEFAULT_CONFIG
        self.start_date = to_date(start_date) if start_date is not None else dt.date.today()
        self.stop_date = to_date(stop_date)
        self.state = TrajectoryState.UNINITIALIZED

        entity = f"trajectory {self.name!r}"
        if self.stop_date < self.start_date:
            raise ConfigurationError(
                f"stop_date {self.stop_date} is before start_date {self.start_date}",
                entity=entity,
            )

        names = account_group.account_names
        reserved = {self.config.date_column, self.config.total_column}
        clashes = sorted(reserved.intersection(names))
        if clashes:
            raise ConfigurationError(f"account names {clashes} are reserved", entity=entity)
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ConfigurationError(
                f"account group {account_group.name!r} lists {dupes} more than once",
                entity=entity,
            )

        self.table = self._initial_table()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @property
    def account_names(self) -> List[str]:
        return self.account_group.account_names

    @property
    def step_count(self) -> int:
        """Days simulated so far."""
        return len(self.table) - 1

    @property
    def expected_rows(self) -> int:
        return (self.stop_date - self.start_date).days + 1

    def _initial_table(self) -> pd.DataFrame:
        cfg = self.config
        row: Dict[str, object] = {cfg.date_column: pd.Timestamp(self.start_date)}
        for a in self.account_group.accounts:
            row[a.name] = a.value
        row[cfg.total_column] = current_value(self.account_group)
        columns = [cfg.date_column, *self.account_names, cfg.total_column]
        return pd.DataFrame([row], columns=columns)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def simulate(self) -> pd.DataFrame:
        """
        Fill the table up to and including stop_date.

        Raises SimulationError if called more than once; a trajectory is
        simulated exactly one time from its start date.
        """
        if self.state is not TrajectoryState.UNINITIALIZED:
            raise SimulationError(
                f"Trajectory {self.name!r} is {self.state.value}; simulate() runs once."
            )

        cfg = self.config
        group = copy.deepcopy(self.account_group)
        accounts = group.accounts
        ordered = order_accounts(accounts)
        init_schedules(accounts, self.start_date)
        self.state = TrajectoryState.RUNNING

        column = {id(a): i for i, a in enumerate(accounts)}
        n_accounts = len(accounts)
        n_steps = self.expected_rows - 1

        values = np.zeros((n_steps, n_accounts), dtype=float)
        totals = np.zeros(n_steps, dtype=float)
        previous = self.table.iloc[-1][self.account_names].to_numpy(dtype=float)

        for step in range(n_steps):
            date = self.start_date + dt.timedelta(days=step + 1)
            current = np.zeros(n_accounts, dtype=float)
            account_transfers: DefaultDict[Account, float] = defaultdict(float)

            for a in ordered:
                i = column[id(a)]
                share_price = None
                if a.share_price is not None:
                    share_price = float(current[column[id(a.share_price)]])
                next_value, next_transfers = get_next_value(
                    date, a, float(previous[i]), share_price,
                    days_per_year=cfg.days_per_year,
                )
                current[i] = next_value
                for target, amount in next_transfers.items():
                    account_transfers[target] += amount

            # Transfers land after every account has been valued.
            for target, amount in account_transfers.items():
                j = column.get(id(target))
                if j is None:
                    logger.debug(
                        "%s: transfer of %.2f to %s leaves group %s on %s",
                        self.name, amount, target.name, group.name, date,
                    )
                    continue
                current[j] += amount

            values[step] = current
            totals[step] = current.sum()
            previous = current

        if n_steps:
            steps = pd.DataFrame(values, columns=self.account_names)
            steps.insert(0, cfg.date_column, simulation_days(self.start_date, self.stop_date)[1:])
            steps[cfg.total_column] = totals
            self.table = pd.concat([self.table, steps], ignore_index=True)
        self.state = TrajectoryState.COMPLETE

        logger.info(
            "Simulated %s: %d rows, %s -> %s, total %.2f -> %.2f",
            self.name, len(self.table), self.start_date, self.stop_date,
            self.initial_value(), self.current_value(),
        )
        return self.table

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def initial_value(self) -> float:
        """Total of all account values in the first row."""
        return float(self.table.iloc[0][self.account_names].sum())

    def current_value(self) -> float:
        """Total of all account values in the last row."""
        return float(self.table.iloc[-1][self.account_names].sum())

    def total_change(self) -> float:
        return self.current_value() - self.initial_value()

    def account_series(self, name: str) -> pd.Series:
        """Date-indexed values of one account column (or the total column)."""
        require_columns(self.table, [name])
        return self.table.set_index(self.config.date_column)[name]

    def column_sum(self, names: Iterable[str], *, label: Optional[str] = None) -> pd.Series:
        """Date-indexed element-wise sum of several columns."""
        names = list(names)
        require_columns(self.table, names)
        summed = self.table.set_index(self.config.date_column)[names].sum(axis=1)
        return summed.rename(label) if label is not None else summed

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return (
            f"Trajectory(name={self.name!r}, group={self.account_group.name!r}, "
            f"start={self.start_date}, stop={self.stop_date}, state={self.state.value})"
        )
