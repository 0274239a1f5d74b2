"""Savings health and goal progress evaluation.

These helpers turn aggregated numbers into the figures the dashboard and
report views display: the savings rate, its health tier, and progress
towards a savings goal.  Every division is guarded; no function here
returns ``NaN`` or ``Infinity``.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np

from .config import GOAL_DOT_STEPS, HEALTH_THRESHOLDS

TIER_EXCELLENT = 'excellent'
TIER_GOOD = 'good'
TIER_WARNING = 'warning'
TIER_DANGER = 'danger'

BAND_ON_TRACK = 'on_track'
BAND_HALFWAY = 'halfway'
BAND_BEHIND = 'behind'


@dataclass
class HealthReport:
    income: float
    expense: float
    balance: float
    savings_rate: float
    health_tier: str
    bar_width: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GoalProgress:
    goal: float
    net_saved: float
    progress_pct: float
    dot_count: int
    band: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _finite(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _clamp(value: float, lower: float, upper: float) -> float:
    return float(min(max(value, lower), upper))


def savings_rate(income: float, balance: float) -> float:
    """Balance as a percentage of income, or ``0`` when there is no income."""
    income = _finite(income)
    balance = _finite(balance)
    if income <= 0:
        return 0.0
    return _finite(balance * 100 / income)


def expense_ratio(income: float, expense: float) -> float:
    """Expense as a percentage of income, or ``0`` when there is no income."""
    income = _finite(income)
    expense = _finite(expense)
    if income <= 0:
        return 0.0
    return _finite(expense * 100 / income)


def health_tier(rate: float) -> str:
    """Classify a savings rate; thresholds are checked in order and the first match wins."""
    rate = _finite(rate)
    for threshold, tier in HEALTH_THRESHOLDS:
        if rate >= threshold:
            return tier
    return TIER_DANGER


def savings_bar_width(rate: float) -> float:
    """Savings rate clamped into ``[0, 100]`` for the report progress bar."""
    return _clamp(_finite(rate), 0.0, 100.0)


def goal_progress(net_saved: float, goal: float) -> float:
    """Percentage of ``goal`` reached, clamped into ``[0, 100]``."""
    net_saved = _finite(net_saved)
    goal = _finite(goal)
    if goal <= 0:
        return 0.0
    return _clamp(net_saved * 100 / goal, 0.0, 100.0)


def dot_count(net_saved: float, goal: float, steps: int = GOAL_DOT_STEPS) -> int:
    """Number of lit goal dots, one per ``100 / steps`` percent reached."""
    net_saved = _finite(net_saved)
    goal = _finite(goal)
    if goal <= 0 or steps <= 0:
        return 0
    ratio = net_saved * steps / goal
    if not math.isfinite(ratio):
        return steps if ratio > 0 else 0
    lit = int(np.floor(ratio))
    return int(min(max(lit, 0), steps))


def progress_band(pct: float) -> str:
    pct = _finite(pct)
    if pct >= 80:
        return BAND_ON_TRACK
    if pct >= 50:
        return BAND_HALFWAY
    return BAND_BEHIND


def evaluate_health(totals: Any) -> HealthReport:
    """Build a :class:`HealthReport` from anything exposing income/expense/balance.

    ``totals`` may be a :class:`~expense_tracker.aggregation.Totals` or a
    plain mapping with the same keys.
    """
    income = _finite(_field(totals, 'income'))
    expense = _finite(_field(totals, 'expense'))
    balance_value = _field(totals, 'balance')
    balance = income - expense if balance_value is None else _finite(balance_value)
    rate = savings_rate(income, balance)
    return HealthReport(
        income=income,
        expense=expense,
        balance=balance,
        savings_rate=rate,
        health_tier=health_tier(rate),
        bar_width=savings_bar_width(rate),
    )


def evaluate_goal(net_saved: float, goal: float) -> GoalProgress:
    pct = goal_progress(net_saved, goal)
    return GoalProgress(
        goal=_finite(goal),
        net_saved=_finite(net_saved),
        progress_pct=pct,
        dot_count=dot_count(net_saved, goal),
        band=progress_band(pct),
    )


def _field(source: Any, name: str) -> Optional[Any]:
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)
