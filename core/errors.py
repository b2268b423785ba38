"""
Error taxonomy.

ConfigurationError  — bad or incomplete system definition (fail fast at build time)
DependencyError     — share-price accounts that cannot be valued in a single ordered pass
ScheduleError       — recurrence the scheduler does not know how to place
SimulationError     — trajectory driven outside its state machine
"""

from __future__ import annotations

from typing import Optional


class BlingError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(BlingError, ValueError):
    """Invalid configuration, identifying the offending entity when known."""

    def __init__(self, message: str, *, entity: Optional[str] = None):
        self.entity = entity
        self.reason = message
        if entity:
            message = f"Invalid configuration for {entity}: {message}"
        else:
            message = f"Invalid configuration: {message}"
        super().__init__(message)


class DependencyError(ConfigurationError):
    pass


class ScheduleError(BlingError, ValueError):
    pass


class SimulationError(BlingError, RuntimeError):
    pass
