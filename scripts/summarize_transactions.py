#!/usr/bin/env python3
"""Print dashboard, category and monthly summaries for a transaction snapshot file."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pandas as pd

from expense_tracker import config
from expense_tracker.logging_setup import configure_logging, get_logger
from expense_tracker.records import load_records
from expense_tracker.views import dashboard_view, report_view

logger = get_logger("expense_tracker.scripts.summarize")


def main(path: Path, months: int, goal: float, as_json: bool) -> int:
    try:
        records = load_records(path)
    except (OSError, ValueError) as exc:
        logger.error("Could not load %s: %s", path, exc)
        return 1

    dashboard = dashboard_view(records, savings_goal=goal, months=months)
    report = report_view(records, period='all')

    if as_json:
        payload = {'dashboard': dashboard.to_dict(), 'report': report.to_dict()}
        print(json.dumps(payload, indent=2, default=str))
        return 0

    totals = dashboard.totals
    print(f"Transactions: {totals.count}")
    print(f"Income: {totals.income:,.2f}  Expense: {totals.expense:,.2f}  Balance: {totals.balance:,.2f}")
    print(f"Savings rate: {dashboard.health.savings_rate:.1f}% ({dashboard.health.health_tier})")
    print(
        f"This month: {dashboard.month_income_count} income / {dashboard.month_expense_count} expense entries, "
        f"expense ratio {dashboard.expense_ratio:.1f}%"
    )
    print(
        f"Goal {dashboard.goal.goal:,.2f}: {dashboard.goal.progress_pct:.1f}% "
        f"({'●' * dashboard.goal.dot_count}{'○' * (config.GOAL_DOT_STEPS - dashboard.goal.dot_count)})"
    )

    monthly = pd.DataFrame([m.to_dict() for m in dashboard.monthly])
    if not monthly.empty:
        print("\nMonthly:")
        print(monthly[['month_key', 'income', 'expense', 'balance', 'transaction_count']].to_string(index=False))

    categories = pd.DataFrame([c.to_dict() for c in report.categories])
    if not categories.empty:
        print("\nBy category:")
        print(categories[['name', 'income', 'expense', 'total', 'count', 'share']].to_string(index=False))
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Summarize a transaction snapshot (JSON or CSV).')
    parser.add_argument('path', type=Path, help='Snapshot file to read')
    parser.add_argument('--months', type=int, default=config.TRAILING_MONTHS, help='Trailing months to summarize')
    parser.add_argument('--goal', type=float, default=config.SAVINGS_GOAL, help='Monthly savings goal')
    parser.add_argument('--json', action='store_true', help='Emit JSON instead of tables')
    parser.add_argument('--log-level', default=None, help='Logging level (default: EXPENSE_TRACKER_LOG_LEVEL or INFO)')
    args = parser.parse_args()
    configure_logging(args.log_level)
    raise SystemExit(main(args.path, months=args.months, goal=args.goal, as_json=args.json))
