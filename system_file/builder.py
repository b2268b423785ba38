"""
Build a simulation system from a parsed system file.

Construction order:
  1. independent accounts (plain or growing)
  2. share-price accounts, which need their source account to exist for a starting value
  3. every update, in declared order, once all accounts exist so transfer_to can resolve
  4. account groups, trajectories, plot definitions
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
from dateutil.relativedelta import relativedelta
from pydantic import ValidationError

from accounts.models import Account, AccountGroup, AccountUpdate
from core.config import DEFAULT_CONFIG, SimulationConfig
from core.errors import ConfigurationError, DependencyError
from engine.runner import run_trajectories
from engine.trajectory import Trajectory

from .loader import load_system_file
from .schema import AccountSpec, PlotSpec, SystemSpec

logger = logging.getLogger(__name__)


@dataclass
class System:
    """Everything a system file defines, resolved to live objects."""
    accounts: Dict[str, Account] = field(default_factory=dict)
    account_groups: Dict[str, AccountGroup] = field(default_factory=dict)
    trajectories: Dict[str, Trajectory] = field(default_factory=dict)
    plots: List[PlotSpec] = field(default_factory=list)

    def simulate_all(self) -> Dict[str, pd.DataFrame]:
        return run_trajectories(self.trajectories)


def _describe_location(raw: Mapping[str, Any], loc: Sequence[Union[str, int]]) -> Optional[str]:
    """Turn a pydantic error location into e.g. "account 'A'" using the raw document."""
    labels = {
        "accounts": "account",
        "account_groups": "account group",
        "trajectories": "trajectory",
        "plots": "plot",
    }
    if len(loc) < 2 or loc[0] not in labels or not isinstance(loc[1], int):
        return None
    section, index = loc[0], loc[1]
    try:
        item = raw[section][index]
    except (KeyError, IndexError, TypeError):
        return f"{labels[section]} #{index + 1}"
    key = "file_name" if section == "plots" else "name"
    name = item.get(key) if isinstance(item, Mapping) else None
    return f"{labels[section]} {str(name)!r}" if name is not None else f"{labels[section]} #{index + 1}"


def parse_system(raw: Mapping[str, Any]) -> SystemSpec:
    """Validate a raw system document, converting schema errors to ConfigurationError."""
    try:
        return SystemSpec.model_validate(dict(raw))
    except ValidationError as exc:
        first = exc.errors()[0]
        loc = first.get("loc", ())
        where = ".".join(str(p) for p in loc)
        message = first.get("msg", str(exc))
        if where:
            message = f"{where}: {message}"
        raise ConfigurationError(message, entity=_describe_location(raw, loc)) from exc


def _build_update(spec_update, owner: str, index: int, accounts: Mapping[str, Account]) -> AccountUpdate:
    entity = f"account {owner!r} update #{index + 1}"
    target = None
    if spec_update.transfer_to is not None:
        if spec_update.transfer_to not in accounts:
            raise ConfigurationError(
                f"transfer_to refers to unknown account {spec_update.transfer_to!r}", entity=entity
            )
        target = accounts[spec_update.transfer_to]
    try:
        return AccountUpdate.from_day(
            spec_update.value_change,
            spec_update.recurrence,
            spec_update.day,
            target_account=target,
        )
    except ConfigurationError as exc:
        raise ConfigurationError(exc.reason, entity=entity) from exc


def _build_accounts(specs: Sequence[AccountSpec]) -> Dict[str, Account]:
    built: Dict[str, Account] = {}
    by_name = {s.name: s for s in specs}

    # Pass 1: accounts that stand on their own.
    for s in specs:
        if s.share_price is None:
            built[s.name] = Account(s.name, s.value, s.growth_rate or 0.0)

    # Pass 2: share-price accounts start from their source's value.
    for s in specs:
        if s.share_price is None:
            continue
        entity = f"account {s.name!r}"
        if s.share_price not in by_name:
            raise ConfigurationError(f"share_price refers to unknown account {s.share_price!r}", entity=entity)
        if by_name[s.share_price].share_price is not None:
            raise DependencyError(
                f"share_price source {s.share_price!r} is itself a share-price account", entity=entity
            )
        built[s.name] = Account.derived(s.name, built[s.share_price], s.num_shares, s.strike_price)

    # Pass 3: updates, now that every transfer target exists.
    for s in specs:
        account = built[s.name]
        for i, u in enumerate(s.updates):
            account.updates.append(_build_update(u, s.name, i, built))

    return {s.name: built[s.name] for s in specs}


def build_system(
    source: Union[Mapping[str, Any], SystemSpec],
    *,
    today: Optional[dt.date] = None,
    config: Optional[SimulationConfig] = None,
) -> System:
    """
    Resolve a system document into Accounts, AccountGroups, Trajectories and plots.

    Parameters
    ----------
    source : Mapping or SystemSpec
        Raw document (as loaded from YAML) or an already parsed SystemSpec
    today : datetime.date, optional
        Default trajectory start date, and base of the default stop date
    config : SimulationConfig, optional
        Run settings passed to every Trajectory
    """
    spec = source if isinstance(source, SystemSpec) else parse_system(source)
    cfg = config or DEFAULT_CONFIG
    today = today or dt.date.today()

    accounts = _build_accounts(spec.accounts)

    account_groups: Dict[str, AccountGroup] = {}
    for g in spec.account_groups:
        missing = [n for n in g.accounts if n not in accounts]
        if missing:
            raise ConfigurationError(f"unknown accounts {missing}", entity=f"account group {g.name!r}")
        account_groups[g.name] = AccountGroup(g.name, [accounts[n] for n in g.accounts])

    trajectories: Dict[str, Trajectory] = {}
    for t in spec.trajectories:
        entity = f"trajectory {t.name!r}"
        if t.account_group not in account_groups:
            raise ConfigurationError(f"unknown account_group {t.account_group!r}", entity=entity)
        start_date = t.start_date or today
        stop_date = t.stop_date or (today + relativedelta(years=cfg.default_horizon_years))
        trajectories[t.name] = Trajectory(
            t.name,
            account_groups[t.account_group],
            stop_date,
            start_date=start_date,
            config=cfg,
        )

    for p in spec.plots:
        entity = f"plot {p.file_name!r}"
        if p.trajectory not in trajectories:
            raise ConfigurationError(f"unknown trajectory {p.trajectory!r}", entity=entity)
        columns = set(trajectories[p.trajectory].account_names) | {cfg.total_column}
        wanted = list(p.account_names)
        for s in p.account_sums:
            wanted.extend(s.account_names)
        missing = sorted({n for n in wanted if n not in columns})
        if missing:
            raise ConfigurationError(
                f"accounts {missing} are not in trajectory {p.trajectory!r}", entity=entity
            )

    logger.info(
        "Built system: %d accounts, %d groups, %d trajectories, %d plots",
        len(accounts), len(account_groups), len(trajectories), len(spec.plots),
    )
    return System(accounts, account_groups, trajectories, list(spec.plots))


def read_system_file(
    path: Union[str, Path],
    *,
    today: Optional[dt.date] = None,
    config: Optional[SimulationConfig] = None,
) -> System:
    """Load and build a YAML system file."""
    return build_system(load_system_file(path), today=today, config=config)
