"""Top-level package for the expense tracker engine.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``records`` – normalization of record snapshots and entry-form validation
* ``aggregation`` – totals, monthly, category and period summaries
* ``selection`` – search, type filter, sorting and pagination for the list view
* ``goals`` – savings rate, health tiers and savings-goal progress
* ``store`` – in-memory transaction store with snapshot subscriptions
* ``views`` – dashboard, list and report bundles for the presentation layer

To summarize a snapshot file from the command line you can execute:

```bash
python scripts/summarize_transactions.py transactions.json
```
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import goals  # noqa: F401  # re-exported for convenience
from . import records  # noqa: F401  # re-exported for convenience
from . import selection  # noqa: F401  # re-exported for convenience
from .aggregation import TransactionAnalytics, category_summary, compute_totals, monthly_summary, period_report
from .goals import evaluate_goal, evaluate_health, goal_progress, health_tier, savings_rate
from .records import TransactionValidationError, normalize_records, validate_transaction
from .selection import ListQuery, PageResult, select
from .store import TransactionStore
from .views import LiveViews, dashboard_view, list_view, report_view

__all__ = [
    "aggregation",
    "goals",
    "records",
    "selection",
    "TransactionAnalytics",
    "compute_totals",
    "monthly_summary",
    "category_summary",
    "period_report",
    "savings_rate",
    "health_tier",
    "goal_progress",
    "evaluate_health",
    "evaluate_goal",
    "TransactionValidationError",
    "normalize_records",
    "validate_transaction",
    "ListQuery",
    "PageResult",
    "select",
    "TransactionStore",
    "LiveViews",
    "dashboard_view",
    "list_view",
    "report_view",
]
