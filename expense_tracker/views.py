"""View bundles handed to the presentation layer.

Each function takes a full record snapshot and returns a plain value object
(``to_dict()`` gives a JSON-serializable dict) with everything one screen
needs.  :class:`LiveViews` keeps those bundles current by recomputing them
from scratch on every snapshot a :class:`~expense_tracker.store.TransactionStore`
pushes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .aggregation import MonthSummary, PeriodReport, Totals, TransactionAnalytics, PERIOD_MONTHLY
from .config import RECENT_LIMIT, SAVINGS_GOAL
from .goals import GoalProgress, HealthReport, evaluate_goal, evaluate_health, expense_ratio
from .logging_setup import get_logger
from .records import TYPE_EXPENSE, TYPE_INCOME, RecordsLike
from .selection import ListQuery, PageResult, select

logger = get_logger(__name__)


@dataclass
class DashboardView:
    totals: Totals
    current_month: Totals
    health: HealthReport
    goal: GoalProgress
    income_share: float = 0.0
    expense_share: float = 0.0
    expense_ratio: float = 0.0
    month_income_count: int = 0
    month_expense_count: int = 0
    monthly: List[MonthSummary] = field(default_factory=list)
    recent: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def dashboard_view(
    records: RecordsLike,
    savings_goal: Optional[float] = None,
    today: Any = None,
    months: Optional[int] = None,
    recent_limit: int = RECENT_LIMIT,
) -> DashboardView:
    """Overall totals, this month's figures, savings health and goal progress.

    Goal progress is measured on the current month's net savings (income
    minus expense), against ``savings_goal`` (defaults to the configured
    monthly goal).  ``expense_ratio`` is this month's expense as a
    percentage of this month's income.
    """
    analytics = TransactionAnalytics(records)
    totals = analytics.totals()
    this_month = analytics.current_month(today)
    month_counts = analytics.current_month_counts(today)
    goal = SAVINGS_GOAL if savings_goal is None else savings_goal
    flow = totals.income + totals.expense
    return DashboardView(
        totals=totals,
        current_month=this_month,
        health=evaluate_health(totals),
        goal=evaluate_goal(this_month.balance, goal),
        income_share=totals.income * 100 / flow if flow > 0 else 0.0,
        expense_share=totals.expense * 100 / flow if flow > 0 else 0.0,
        expense_ratio=expense_ratio(this_month.income, this_month.expense),
        month_income_count=month_counts[TYPE_INCOME],
        month_expense_count=month_counts[TYPE_EXPENSE],
        monthly=analytics.monthly_summary(months, today=today),
        recent=analytics.recent(recent_limit),
    )


def list_view(records: RecordsLike, query: Optional[ListQuery] = None) -> PageResult:
    return select(records, query)


def report_view(
    records: RecordsLike,
    period: str = PERIOD_MONTHLY,
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Any = None,
) -> PeriodReport:
    return TransactionAnalytics(records).period_report(period, year, month, today=today)


class LiveViews:
    """Store subscriber that recomputes the dashboard and list on every snapshot."""

    def __init__(
        self,
        store: Any = None,
        *,
        query: Optional[ListQuery] = None,
        savings_goal: Optional[float] = None,
        months: Optional[int] = None,
        today: Any = None,
    ):
        self.query = query or ListQuery()
        self.savings_goal = savings_goal
        self.months = months
        self.today = today
        self.snapshot: List[Dict[str, Any]] = []
        self.dashboard: Optional[DashboardView] = None
        self.listing: Optional[PageResult] = None
        self.refresh_count = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        if store is not None:
            self._unsubscribe = store.subscribe(self.refresh)

    def refresh(self, snapshot: List[Dict[str, Any]]) -> None:
        self.snapshot = list(snapshot)
        self.dashboard = dashboard_view(
            self.snapshot,
            savings_goal=self.savings_goal,
            today=self.today,
            months=self.months,
        )
        self.listing = list_view(self.snapshot, self.query)
        self.refresh_count += 1
        logger.debug("Recomputed views for %d records", len(self.snapshot))

    def set_query(self, query: ListQuery) -> PageResult:
        self.query = query
        self.listing = list_view(self.snapshot, query)
        return self.listing

    def report(self, period: str = PERIOD_MONTHLY, year: Optional[int] = None, month: Optional[int] = None) -> PeriodReport:
        return report_view(self.snapshot, period, year, month, today=self.today)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
