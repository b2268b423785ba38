"""
Account model — accounts, their scheduled updates, and groups of accounts.
"""

from .models import Account, AccountGroup, AccountUpdate, current_value, value_at_time

__all__ = [
    "Account",
    "AccountGroup",
    "AccountUpdate",
    "current_value",
    "value_at_time",
]
