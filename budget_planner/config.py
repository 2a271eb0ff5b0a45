"""Configuration management for the budget planner.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in budget_planner/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("BUDGET_PLANNER_DATA_DIR", _PROJECT_ROOT / "data"))
REPORTS_DIR = DATA_DIR / "reports"

# Persisted budgets and expenses
STATE_PATH = Path(
    os.getenv("BUDGET_PLANNER_STATE_PATH", DATA_DIR / "budget_state.json")
).resolve()

# Display currency
CURRENCY_SYMBOL = os.getenv("BUDGET_PLANNER_CURRENCY", "S/")


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, REPORTS_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_state_path() -> str:
    """Get the state file path as a string."""
    return str(STATE_PATH)
