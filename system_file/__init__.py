"""
System files — loading YAML system definitions, building accounts, groups,
trajectories and plot definitions from them, and pre-flight validation.
"""

from .builder import System, build_system, parse_system, read_system_file
from .loader import load_system_file
from .schema import PlotSpec, SystemSpec
from .validators import ValidationResult, validate_system

__all__ = [
    "System",
    "build_system",
    "parse_system",
    "read_system_file",
    "load_system_file",
    "PlotSpec",
    "SystemSpec",
    "ValidationResult",
    "validate_system",
]
