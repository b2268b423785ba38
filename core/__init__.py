"""
Core package — run settings, shared constants, error taxonomy and small helpers.
No business logic lives here.
"""

from .config import DEFAULT_CONFIG, SimulationConfig
from .errors import (
    BlingError,
    ConfigurationError,
    DependencyError,
    ScheduleError,
    SimulationError,
)
from .schema import RECURRENCES, DATE_COLUMN, TOTAL_COLUMN
from .utils import daily_growth_factor, parse_weekday, require_columns, to_date

__all__ = [
    "DEFAULT_CONFIG",
    "SimulationConfig",
    "BlingError",
    "ConfigurationError",
    "DependencyError",
    "ScheduleError",
    "SimulationError",
    "RECURRENCES",
    "DATE_COLUMN",
    "TOTAL_COLUMN",
    "daily_growth_factor",
    "parse_weekday",
    "require_columns",
    "to_date",
]
