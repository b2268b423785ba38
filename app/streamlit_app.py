"""
blingslang — Trajectory Dashboard
=================================

Load a YAML system file, simulate its trajectories, and explore:
  1. Balance over time for any subset of accounts (plus the group total)
  2. Per-account start/end/change summary
  3. Plot definitions from the system file, including named account sums
  4. The raw day-by-day table

Run: streamlit run app/streamlit_app.py   (or: blingsim dashboard)
"""

from __future__ import annotations

import datetime as dt
import sys
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st
import yaml

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import BlingError  # noqa: E402
from engine.runner import run_trajectories  # noqa: E402
from reports.metrics import summarize_trajectory, trajectory_totals  # noqa: E402
from reports.plot import collect_plot_series  # noqa: E402
from system_file.builder import build_system  # noqa: E402
from system_file.validators import validate_system  # noqa: E402

EXAMPLE_SYSTEM = PROJECT_ROOT / "tests" / "systems" / "system1.yml"


# ---------------------------------------------------------------------------
# Cached simulation
# ---------------------------------------------------------------------------
@st.cache_resource(show_spinner="Simulating trajectories...")
def _simulate(document: str, start: dt.date):
    """Build and simulate a system; keyed on the YAML text and start date."""
    system = build_system(yaml.safe_load(document) or {}, today=start)
    run_trajectories(system.trajectories)
    return system


# ---------------------------------------------------------------------------
# Chart helpers
# ---------------------------------------------------------------------------
def _fmt_balance(val):
    """Format balance with commas."""
    return f"{val:,.0f}"


def _plot_multi_line(df, *, title, y_title, height=360):
    if not isinstance(df, pd.DataFrame) or df.empty:
        st.info("No data to plot.")
        return
    long = (
        df.rename_axis("date").reset_index()
        .melt(id_vars=["date"], var_name="series", value_name="value")
    )
    chart = (
        alt.Chart(long).mark_line()
        .encode(
            x=alt.X("date:T", title="Date"),
            y=alt.Y("value:Q", title=y_title, axis=alt.Axis(format=",.0f")),
            color=alt.Color("series:N", title="Series"),
        )
        .properties(title=title, height=height)
    )
    st.altair_chart(chart, use_container_width=True)


# ═══════════════════════════════════════════════════════════════════════════
# PAGE CONFIG
# ═══════════════════════════════════════════════════════════════════════════
st.set_page_config(page_title="blingslang", layout="wide")
st.title("blingslang")
st.caption("Deterministic account trajectories: growth, scheduled updates, transfers")

# ═══════════════════════════════════════════════════════════════════════════
# SIDEBAR: System Selection
# ═══════════════════════════════════════════════════════════════════════════
with st.sidebar:
    st.header("System")
    uploaded = st.file_uploader("System file (YAML)", type=["yml", "yaml"])
    path_text = st.text_input(
        "…or path", value=str(EXAMPLE_SYSTEM) if EXAMPLE_SYSTEM.exists() else ""
    )
    start_date = st.date_input("Start date", value=dt.date.today())

if uploaded is not None:
    document = uploaded.getvalue().decode("utf-8")
elif path_text and Path(path_text).is_file():
    document = Path(path_text).read_text(encoding="utf-8")
else:
    st.info("Upload a system file or enter a path in the sidebar.")
    st.stop()

try:
    system = _simulate(document, start_date)
except (BlingError, ValueError) as e:
    st.error(str(e))
    st.stop()

if not system.trajectories:
    st.warning("The system file defines no trajectories.")
    st.stop()

vr = validate_system(system)
if not vr.is_valid or vr.warnings:
    with st.expander("Validation", expanded=not vr.is_valid):
        st.text(vr.summary())

# ═══════════════════════════════════════════════════════════════════════════
# TRAJECTORY
# ═══════════════════════════════════════════════════════════════════════════
with st.sidebar:
    traj_name = st.selectbox("Trajectory", options=list(system.trajectories))
traj = system.trajectories[traj_name]
totals = trajectory_totals(traj)

st.subheader(f"Trajectory: {traj.name}")
c1, c2, c3, c4 = st.columns(4)
c1.metric("Account Group", totals["account_group"])
c2.metric("Start Total", _fmt_balance(totals["start_value"]))
c3.metric("End Total", _fmt_balance(totals["end_value"]),
          delta=_fmt_balance(totals["change"]))
c4.metric("Days", f"{totals['days']:,}", help=f"{totals['start_date']} → {totals['stop_date']}")

columns = traj.account_names + [traj.config.total_column]
selected = st.multiselect("Series", options=columns, default=traj.account_names)
_plot_multi_line(
    collect_plot_series(traj, account_names=selected) if selected else None,
    title="Balance over time", y_title="Balance",
)

st.markdown("#### Summary")
summary = summarize_trajectory(traj)
st.dataframe(
    summary.style.format({
        "start_value": "{:,.2f}", "end_value": "{:,.2f}",
        "change": "{:+,.2f}", "pct_change": "{:+.2%}",
    }, na_rep="—"),
    use_container_width=True, hide_index=True,
)

# ═══════════════════════════════════════════════════════════════════════════
# PLOT DEFINITIONS
# ═══════════════════════════════════════════════════════════════════════════
plots = [p for p in system.plots if p.trajectory == traj.name]
if plots:
    st.divider()
    st.markdown("#### Plots from the system file")
    for p in plots:
        _plot_multi_line(
            collect_plot_series(traj, p.account_names, p.account_sums),
            title=p.file_name, y_title="Balance", height=280,
        )

# ═══════════════════════════════════════════════════════════════════════════
# RAW TABLE
# ═══════════════════════════════════════════════════════════════════════════
with st.expander("Day-by-day table"):
    st.dataframe(traj.table, use_container_width=True, hide_index=True)
    st.download_button(
        "Download CSV",
        traj.table.to_csv(index=False).encode("utf-8"),
        file_name=f"{traj.name}.csv",
        mime="text/csv",
    )
