"""
Trajectory summaries.

Per-account start/end/change figures for a simulated trajectory, and the
headline totals used by the CLI and dashboard.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from core.utils import require_columns
from engine.trajectory import Trajectory


def summarize_trajectory(traj: Trajectory) -> pd.DataFrame:
    """
    One row per account plus a total row.

    Returns
    -------
    DataFrame with columns:
        account, start_value, end_value, change, pct_change
    pct_change is NaN where the start value is zero.
    """
    table = traj.table
    total_col = traj.config.total_column
    names = traj.account_names
    require_columns(table, [*names, total_col])

    first = table.iloc[0]
    last = table.iloc[-1]

    rows = []
    for name in [*names, total_col]:
        start = float(first[name])
        end = float(last[name])
        rows.append({
            "account": name,
            "start_value": start,
            "end_value": end,
            "change": end - start,
            "pct_change": (end - start) / abs(start) if start != 0 else np.nan,
        })
    return pd.DataFrame(rows)


def trajectory_totals(traj: Trajectory) -> Dict[str, object]:
    """Headline figures: dates, days simulated, start/end/change of the group total."""
    start = traj.initial_value()
    end = traj.current_value()
    return {
        "name": traj.name,
        "account_group": traj.account_group.name,
        "start_date": traj.start_date,
        "stop_date": traj.stop_date,
        "days": traj.step_count,
        "start_value": start,
        "end_value": end,
        "change": end - start,
    }
