"""Configuration management for the expense tracker engine.

This module centralizes all configuration values including defaults for
the list view, the dashboard savings goal and on-disk locations, with
environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in expense_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

# List-view preferences and savings goal
PREFERENCES_PATH = Path(
    os.getenv("EXPENSE_TRACKER_PREFERENCES_PATH", DATA_DIR / "preferences.json")
).resolve()

# Engine defaults
PAGE_SIZE = _env_int("EXPENSE_TRACKER_PAGE_SIZE", 10)
SAVINGS_GOAL = _env_float("EXPENSE_TRACKER_SAVINGS_GOAL", 10000.0)
TRAILING_MONTHS = _env_int("EXPENSE_TRACKER_TRAILING_MONTHS", 6)
RECENT_LIMIT = _env_int("EXPENSE_TRACKER_RECENT_LIMIT", 5)
UNCATEGORIZED_LABEL = os.getenv("EXPENSE_TRACKER_UNCATEGORIZED_LABEL", "Uncategorized")

# Health tier thresholds on the savings rate (percent), checked in order
HEALTH_THRESHOLDS = (
    (20.0, "excellent"),
    (10.0, "good"),
    (0.0, "warning"),
)
GOAL_DOT_STEPS = 5
