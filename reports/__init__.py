"""
Reports — trajectory summaries and balance-over-time plots.
"""

from .metrics import summarize_trajectory, trajectory_totals
from .plot import collect_plot_series, plot_trajectories, render_plots

__all__ = [
    "summarize_trajectory",
    "trajectory_totals",
    "collect_plot_series",
    "plot_trajectories",
    "render_plots",
]
