"""
Trajectory engine — recurrence scheduling, dependency-ordered daily valuation,
and accumulation of the day-indexed table.
"""

from .runner import run_trajectories
from .schedule import init_next_date, init_schedules, set_next_date
from .trajectory import Trajectory, TrajectoryState
from .valuation import get_next_value, order_accounts

__all__ = [
    "run_trajectories",
    "init_next_date",
    "init_schedules",
    "set_next_date",
    "Trajectory",
    "TrajectoryState",
    "get_next_value",
    "order_accounts",
]
