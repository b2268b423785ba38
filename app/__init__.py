"""
Entry points — the blingsim CLI and the streamlit dashboard.
"""
