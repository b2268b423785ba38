"""
Balance-over-time plots for simulated trajectories.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.ticker import StrMethodFormatter  # noqa: E402
import pandas as pd  # noqa: E402

from engine.trajectory import Trajectory  # noqa: E402
from system_file.schema import AccountSumSpec, PlotSpec  # noqa: E402

logger = logging.getLogger(__name__)


def collect_plot_series(
    traj: Trajectory,
    account_names: Optional[Sequence[str]] = None,
    account_sums: Optional[Iterable[Union[AccountSumSpec, Mapping]]] = None,
) -> pd.DataFrame:
    """
    Date-indexed frame of the lines to draw.

    account_names picks table columns ("total" included); with neither
    account_names nor account_sums every account is drawn. Each entry of
    account_sums adds one line named sum_name holding the sum of its accounts.
    """
    account_sums = list(account_sums or [])
    if not account_names and not account_sums:
        account_names = traj.account_names

    lines = {}
    for name in account_names or []:
        lines[name] = traj.account_series(name)
    for s in account_sums:
        spec = s if isinstance(s, AccountSumSpec) else AccountSumSpec.model_validate(s)
        lines[spec.sum_name] = traj.column_sum(spec.account_names)

    return pd.DataFrame(lines)


def plot_trajectories(
    traj: Trajectory,
    account_names: Optional[Sequence[str]] = None,
    account_sums: Optional[Iterable[Union[AccountSumSpec, Mapping]]] = None,
):
    """Line plot of values over time; returns the matplotlib Figure."""
    series = collect_plot_series(traj, account_names, account_sums)

    fig, ax = plt.subplots(figsize=(10, 5))
    for column in series.columns:
        ax.plot(series.index, series[column], label=column)
    ax.set_title("Balance over time")
    ax.set_xlabel("Date")
    ax.set_ylabel("Balance")
    ax.yaxis.set_major_formatter(StrMethodFormatter("{x:,.0f}"))
    ax.grid(True, alpha=0.3)
    ax.legend(loc="best")
    fig.autofmt_xdate()
    fig.tight_layout()
    return fig


def render_plots(
    plots: Sequence[PlotSpec],
    trajectories: Mapping[str, Trajectory],
    out_dir: Union[str, Path] = ".",
) -> List[Path]:
    """Draw and save every plot definition; returns the written paths."""
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for p in plots:
        traj = trajectories[p.trajectory]
        fig = plot_trajectories(traj, p.account_names, p.account_sums)
        path = out / p.file_name
        fig.savefig(path)
        plt.close(fig)
        logger.info("Wrote %s (%s)", path, traj.name)
        written.append(path)
    return written
