"""
Projection runner — simulates every trajectory of a built system.

Trajectories are independent: each simulate() call clones its group's account
graph, so the order in which they run does not change any output.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional

import pandas as pd

from core.errors import ConfigurationError

from .trajectory import Trajectory, TrajectoryState

logger = logging.getLogger(__name__)


def run_trajectories(
    trajectories: Mapping[str, Trajectory],
    *,
    names: Optional[Iterable[str]] = None,
) -> Dict[str, pd.DataFrame]:
    """
    Simulate trajectories and return their tables keyed by name.

    Parameters
    ----------
    trajectories : Mapping[str, Trajectory]
        Trajectories by name, as built from a system file
    names : iterable of str, optional
        Subset to run (default: all, in mapping order)

    Trajectories that already completed are returned as-is rather than re-run.
    """
    selected = list(trajectories) if names is None else list(names)
    unknown = [n for n in selected if n not in trajectories]
    if unknown:
        raise ConfigurationError(f"unknown trajectories {unknown}")

    tables: Dict[str, pd.DataFrame] = {}
    for name in selected:
        traj = trajectories[name]
        if traj.state is TrajectoryState.UNINITIALIZED:
            traj.simulate()
        else:
            logger.debug("Trajectory %s already %s; skipping", name, traj.state.value)
        tables[name] = traj.table
    return tables
