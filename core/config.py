"""
Simulation run settings.
Defaults compound growth daily and run trajectories for 20 years.
"""

from __future__ import annotations

from dataclasses import dataclass

from .schema import DATE_COLUMN, TOTAL_COLUMN


@dataclass(frozen=True)
class SimulationConfig:
    # growth compounds once per simulated day: (1 + r) ** (1 / days_per_year)
    days_per_year: float = 365.0

    # trajectories without an explicit stop_date run this many calendar years
    default_horizon_years: int = 20

    # output table column names
    date_column: str = DATE_COLUMN
    total_column: str = TOTAL_COLUMN


DEFAULT_CONFIG = SimulationConfig()
