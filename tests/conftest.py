# tests/conftest.py
"""Shared pytest setup: import plotwalk from src/ without installing it."""
from __future__ import annotations

import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


def pytest_configure() -> None:
    if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
        sys.path.insert(0, str(SRC_DIR))
