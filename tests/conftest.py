"""
Pytest configuration and shared fixtures.

Usage:
    @pytest.fixture functions are automatically available to all tests.
"""
import sys
from datetime import date
from pathlib import Path
from textwrap import dedent

import pytest

ROOT = Path(__file__).resolve().parents[1]
SYSTEMS = Path(__file__).resolve().parent / "systems"


def pytest_configure():
    """
    Ensure the project root is on sys.path for the flat package layout
    (`core`, `engine`, ...). Keeps tests runnable without an editable install.
    """
    sys.path.insert(0, str(ROOT))


# 2024-01-01 is a Monday; 2024 is a leap year.
START = date(2024, 1, 1)


@pytest.fixture
def start():
    return START


@pytest.fixture
def system1_path():
    return SYSTEMS / "system1.yml"


@pytest.fixture
def system1(system1_path):
    from system_file.builder import read_system_file

    return read_system_file(system1_path, today=START)


@pytest.fixture
def write_system(tmp_path):
    """Write a YAML system document to a temp file and return its path."""

    def _write(text: str, name: str = "system.yml") -> Path:
        path = tmp_path / name
        path.write_text(dedent(text), encoding="utf-8")
        return path

    return _write
