"""
Pre-flight checks for a built system, before any trajectory is simulated.

Catches problems early:
- share-price links a single ordered pass cannot value (blocking)
- transfers whose target is outside the simulated group
- updates and transfers that a share-price account overwrites or sees a day late
- one-off updates dated outside a trajectory's window
- monthly days past the 28th, which drift after the first short month
- accounts that no trajectory ever simulates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.errors import DependencyError
from engine.valuation import order_accounts

from .builder import System


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a system."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_system(system: System) -> ValidationResult:
    """
    Run all checks on a built system.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Accounts ---
    sources = {id(a.share_price) for a in system.accounts.values() if a.share_price is not None}
    for account in system.accounts.values():
        if account.share_price is not None and account.updates:
            result.warnings.append(
                f"Share-price account {account.name!r} has updates; its value is recomputed "
                f"from {account.share_price.name!r} every day and their effect lasts one day."
            )
        for update in account.updates:
            target = update.target_account
            if target is not None and target.share_price is not None:
                result.warnings.append(
                    f"Account {account.name!r} update [{update}] transfers to share-price account "
                    f"{target.name!r}; the credit is overwritten the next day."
                )
            if target is not None and id(target) in sources:
                result.warnings.append(
                    f"Account {account.name!r} update [{update}] transfers to {target.name!r}, "
                    "a share-price source; its dependants pick up the credit one day late."
                )
            if target is account:
                result.warnings.append(
                    f"Account {account.name!r} has an update [{update}] that transfers to itself."
                )
            if update.recurrence == "monthly" and update.day > 28:
                result.warnings.append(
                    f"Account {account.name!r} update [{update}] uses day {update.day}; "
                    "calendar clamping moves it earlier after the first shorter month."
                )

    simulated = {id(a) for t in system.trajectories.values() for a in t.account_group.accounts}
    for name, account in system.accounts.items():
        if id(account) not in simulated:
            result.warnings.append(f"Account {name!r} is not in any simulated account group.")

    # --- Trajectories ---
    for name, traj in system.trajectories.items():
        group = traj.account_group
        if len(group) == 0:
            result.warnings.append(f"Trajectory {name!r} has no accounts.")
            continue

        try:
            order_accounts(group.accounts)
        except DependencyError as exc:
            result.errors.append(f"Trajectory {name!r}: {exc}")

        for account in group.accounts:
            for update in account.updates:
                target = update.target_account
                if target is not None and target not in group:
                    result.warnings.append(
                        f"Trajectory {name!r}: {account.name!r} transfers to {target.name!r}, "
                        f"which is outside group {group.name!r}; the credit leaves the table."
                    )
                if update.recurrence == "once" and not (
                    traj.start_date < update.next_date <= traj.stop_date
                ):
                    result.warnings.append(
                        f"Trajectory {name!r}: one-off update [{update}] on {account.name!r} "
                        f"falls outside ({traj.start_date}, {traj.stop_date}] and never fires."
                    )

    return result
