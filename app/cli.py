"""
blingsim — simulate account trajectories from a YAML system file.

Commands:
- blingsim run SYSTEM.yml      simulate every trajectory, print summaries, write plots
- blingsim check SYSTEM.yml    build the system and report configuration problems
- blingsim dashboard           open the streamlit dashboard
"""
from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.errors import BlingError
from core.utils import to_date
from engine.runner import run_trajectories
from reports.metrics import summarize_trajectory, trajectory_totals
from reports.plot import render_plots
from system_file.builder import read_system_file
from system_file.validators import validate_system

app = typer.Typer(add_completion=False, help="Deterministic account trajectory simulator.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _summary_table(traj) -> Table:
    totals = trajectory_totals(traj)
    table = Table(
        title=f"{traj.name}  ({totals['start_date']} → {totals['stop_date']}, {totals['days']} days)",
        show_lines=False,
    )
    table.add_column("Account")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("%", justify="right")

    for row in summarize_trajectory(traj).itertuples(index=False):
        color = "green" if row.change >= 0 else "red"
        pct = "—" if pd.isna(row.pct_change) else f"{row.pct_change:+.1%}"
        table.add_row(
            str(row.account),
            f"{row.start_value:,.2f}",
            f"{row.end_value:,.2f}",
            f"[{color}]{row.change:+,.2f}[/{color}]",
            pct,
        )
    return table


@app.command("run")
def run_cmd(
    system_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML system file"),
    out_dir: Path = typer.Option(Path("."), "--out-dir", "-o", help="Directory for plot files"),
    start_date: Optional[str] = typer.Option(None, "--start-date", help="YYYY-MM-DD (default: today)"),
    no_plots: bool = typer.Option(False, "--no-plots", help="Skip writing plot files"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Simulate every trajectory in a system file."""
    _configure_logging(verbose)
    try:
        today = to_date(start_date) if start_date else None
        system = read_system_file(system_file, today=today)
        run_trajectories(system.trajectories)
    except (BlingError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    for traj in system.trajectories.values():
        console.print(_summary_table(traj))

    if not no_plots and system.plots:
        for path in render_plots(system.plots, system.trajectories, out_dir):
            console.print(f"[dim]plotted[/dim] {path}")


@app.command("check")
def check_cmd(
    system_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML system file"),
    start_date: Optional[str] = typer.Option(None, "--start-date", help="YYYY-MM-DD (default: today)"),
):
    """Build a system file and report configuration problems without simulating."""
    try:
        today = to_date(start_date) if start_date else None
        system = read_system_file(system_file, today=today)
    except (BlingError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    result = validate_system(system)
    console.print(escape(result.summary()))
    if not result.is_valid:
        raise typer.Exit(1)


@app.command("dashboard")
def dashboard_cmd():
    """Open the streamlit dashboard."""
    script = Path(__file__).resolve().parent / "streamlit_app.py"
    raise typer.Exit(subprocess.call([sys.executable, "-m", "streamlit", "run", str(script)]))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
