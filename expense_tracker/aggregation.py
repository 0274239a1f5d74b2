"""Transaction aggregation and reporting.

:class:`TransactionAnalytics` wraps one record snapshot.  It normalizes the
snapshot once on construction and then derives totals, trailing monthly
summaries, category summaries and period reports from it.  Nothing derived
is cached between calls, and a new snapshot always means a new instance, so
the figures can never drift from the record set they were computed from.

The module level functions (:func:`compute_totals`, :func:`monthly_summary`,
:func:`category_summary`, :func:`period_report`) are one-shot shortcuts for
callers that only need a single figure.
"""

from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from .config import RECENT_LIMIT, TRAILING_MONTHS
from .goals import health_tier, savings_rate
from .records import (
    TYPE_EXPENSE,
    TYPE_INCOME,
    RecordsLike,
    clean_category,
    clean_type,
    coerce_date,
    coerce_int,
    normalize_records,
    records_to_list,
)

PERIOD_MONTHLY = 'monthly'
PERIOD_YEARLY = 'yearly'
PERIOD_ALL = 'all'
PERIODS = (PERIOD_MONTHLY, PERIOD_YEARLY, PERIOD_ALL)


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass
class Totals:
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MonthSummary:
    month_key: str
    year: int
    month: int
    income: float
    expense: float
    balance: float
    transaction_count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CategorySummary:
    name: str
    income: float
    expense: float
    total: float
    count: int
    share: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DaySummary:
    day: int
    income: float
    expense: float
    balance: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PeriodReport:
    period: str
    year: Optional[int]
    month: Optional[int]
    totals: Totals
    categories: List[CategorySummary] = field(default_factory=list)
    daily: List[DaySummary] = field(default_factory=list)
    savings_rate: float = 0.0
    health_tier: str = 'warning'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# DataFrame level helpers
# ---------------------------------------------------------------------------


def _income_amounts(df: pd.DataFrame) -> pd.Series:
    return df['amount'].where(df['type'] == TYPE_INCOME, 0.0)


def _expense_amounts(df: pd.DataFrame) -> pd.Series:
    return df['amount'].where(df['type'] == TYPE_EXPENSE, 0.0)


def _totals(df: pd.DataFrame) -> Totals:
    income = float(_income_amounts(df).sum()) if len(df) else 0.0
    expense = float(_expense_amounts(df).sum()) if len(df) else 0.0
    return Totals(income=income, expense=expense, balance=income - expense, count=int(len(df)))


def _type_counts(df: pd.DataFrame) -> Dict[str, int]:
    return {kind: int((df['type'] == kind).sum()) for kind in (TYPE_INCOME, TYPE_EXPENSE)}


def _category_summary(df: pd.DataFrame) -> List[CategorySummary]:
    if df.empty:
        return []
    frame = pd.DataFrame({
        'category': df['category'],
        'income': _income_amounts(df),
        'expense': _expense_amounts(df),
    })
    grouped = frame.groupby('category', sort=False).agg(
        income=('income', 'sum'),
        expense=('expense', 'sum'),
        count=('income', 'size'),
    )
    grouped['total'] = grouped['income'] + grouped['expense']
    grouped = grouped.sort_values('total', ascending=False, kind='mergesort')

    overall = float(grouped['total'].sum())
    summaries: List[CategorySummary] = []
    for name, row in grouped.iterrows():
        total = float(row['total'])
        summaries.append(CategorySummary(
            name=str(name),
            income=float(row['income']),
            expense=float(row['expense']),
            total=total,
            count=int(row['count']),
            share=(total * 100 / overall) if overall > 0 else 0.0,
        ))
    return summaries


def _daily_summary(df: pd.DataFrame, year: int, month: int) -> List[DaySummary]:
    days_in_month = calendar.monthrange(year, month)[1]
    days = range(1, days_in_month + 1)
    dated = df.dropna(subset=['parsed_date'])
    day_key = dated['parsed_date'].dt.day
    income = _income_amounts(dated).groupby(day_key).sum().reindex(days, fill_value=0.0)
    expense = _expense_amounts(dated).groupby(day_key).sum().reindex(days, fill_value=0.0)
    return [
        DaySummary(
            day=int(day),
            income=float(income.loc[day]),
            expense=float(expense.loc[day]),
            balance=float(income.loc[day] - expense.loc[day]),
        )
        for day in days
    ]


def _resolve_today(today: Any = None) -> pd.Timestamp:
    if today is not None:
        resolved = coerce_date(today)
        if not pd.isna(resolved):
            return resolved
    return pd.Timestamp.now().normalize()


# ---------------------------------------------------------------------------
# Snapshot analytics
# ---------------------------------------------------------------------------


class TransactionAnalytics:
    """Aggregations over a single transaction record snapshot."""

    def __init__(self, records: RecordsLike, uncategorized_label: Optional[str] = None):
        self.records = records_to_list(records)
        self.data = normalize_records(self.records, uncategorized_label)

    # -- record access -----------------------------------------------------

    def _rows(self, mask: Optional[pd.Series] = None) -> List[Dict[str, Any]]:
        positions = self.data['position'] if mask is None else self.data.loc[mask, 'position']
        return [dict(self.records[int(pos)]) for pos in positions]

    def _month_mask(self, year: int, month: int) -> pd.Series:
        dates = self.data['parsed_date']
        return (dates.dt.year == year) & (dates.dt.month == month)

    def _year_mask(self, year: int) -> pd.Series:
        return self.data['parsed_date'].dt.year == year

    def by_month(self, year: int, month: int) -> List[Dict[str, Any]]:
        return self._rows(self._month_mask(year, month))

    def by_year(self, year: int) -> List[Dict[str, Any]]:
        return self._rows(self._year_mask(year))

    def by_date_range(self, start: Any = None, end: Any = None) -> List[Dict[str, Any]]:
        """Records dated within ``[start, end]``; a missing bound is open."""
        dates = self.data['parsed_date']
        mask = dates.notna()
        start_ts = coerce_date(start)
        end_ts = coerce_date(end)
        if not pd.isna(start_ts):
            mask &= dates >= start_ts
        if not pd.isna(end_ts):
            mask &= dates <= end_ts
        return self._rows(mask)

    def by_type(self, transaction_type: str) -> List[Dict[str, Any]]:
        return self._rows(self.data['type'] == clean_type(transaction_type))

    def by_category(self, category: Any) -> List[Dict[str, Any]]:
        label = clean_category(category)
        return self._rows(self.data['category'] == label)

    def recent(self, limit: int = RECENT_LIMIT) -> List[Dict[str, Any]]:
        """The last ``limit`` records in snapshot order."""
        if limit <= 0:
            return []
        return [dict(record) for record in self.records[-limit:]]

    # -- aggregations ------------------------------------------------------

    def totals(self) -> Totals:
        """Income, expense, balance and record count over the whole snapshot.

        Records with an unknown type add to neither sum but are counted.
        """
        return _totals(self.data)

    def current_month(self, today: Any = None) -> Totals:
        now = _resolve_today(today)
        return _totals(self.data[self._month_mask(now.year, now.month)])

    def current_month_counts(self, today: Any = None) -> Dict[str, int]:
        """Number of income and expense records dated in the current month, keyed by type."""
        now = _resolve_today(today)
        return _type_counts(self.data[self._month_mask(now.year, now.month)])

    def monthly_summary(self, months: Optional[int] = None, today: Any = None) -> List[MonthSummary]:
        """Per-month figures for the trailing ``months`` calendar months, oldest first.

        Months without activity are included with zeros.  Records without a
        parseable date are not attributed to any month.
        """
        months = coerce_int(months, TRAILING_MONTHS)
        if months <= 0:
            return []
        current = _resolve_today(today).to_period('M')
        periods = pd.period_range(end=current, periods=months, freq='M')
        keys = [period.strftime('%Y-%m') for period in periods]

        dated = self.data.dropna(subset=['parsed_date'])
        month_key = dated['parsed_date'].dt.strftime('%Y-%m')
        income = _income_amounts(dated).groupby(month_key).sum().reindex(keys, fill_value=0.0)
        expense = _expense_amounts(dated).groupby(month_key).sum().reindex(keys, fill_value=0.0)
        counts = dated.groupby(month_key).size().reindex(keys, fill_value=0)

        summaries: List[MonthSummary] = []
        for period, key in zip(periods, keys):
            month_income = float(income.loc[key])
            month_expense = float(expense.loc[key])
            summaries.append(MonthSummary(
                month_key=key,
                year=int(period.year),
                month=int(period.month),
                income=month_income,
                expense=month_expense,
                balance=month_income - month_expense,
                transaction_count=int(counts.loc[key]),
            ))
        return summaries

    def category_summary(self) -> List[CategorySummary]:
        """Per-category income/expense/total/count, largest total first."""
        return _category_summary(self.data)

    def period_report(
        self,
        period: str = PERIOD_MONTHLY,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Any = None,
    ) -> PeriodReport:
        """Totals, categories, daily breakdown and health for a month, a year or all time.

        Unknown ``period`` values report over all time; a missing or
        non-numeric ``year``/``month`` means the current one.
        """
        now = _resolve_today(today)
        period = period if period in PERIODS else PERIOD_ALL
        year = coerce_int(year, int(now.year))
        month = coerce_int(month, int(now.month))
        if not 1 <= month <= 12:
            month = int(now.month)

        if period == PERIOD_MONTHLY:
            subset = self.data[self._month_mask(year, month)]
        elif period == PERIOD_YEARLY:
            subset = self.data[self._year_mask(year)]
        else:
            subset = self.data

        totals = _totals(subset)
        rate = savings_rate(totals.income, totals.balance)
        return PeriodReport(
            period=period,
            year=year if period != PERIOD_ALL else None,
            month=month if period == PERIOD_MONTHLY else None,
            totals=totals,
            categories=_category_summary(subset),
            daily=_daily_summary(subset, year, month) if period == PERIOD_MONTHLY else [],
            savings_rate=rate,
            health_tier=health_tier(rate),
        )


# ---------------------------------------------------------------------------
# One-shot helpers
# ---------------------------------------------------------------------------


def compute_totals(records: RecordsLike) -> Totals:
    return TransactionAnalytics(records).totals()


def monthly_summary(records: RecordsLike, months: Optional[int] = None, today: Any = None) -> List[MonthSummary]:
    return TransactionAnalytics(records).monthly_summary(months, today=today)


def category_summary(records: RecordsLike, uncategorized_label: Optional[str] = None) -> List[CategorySummary]:
    return TransactionAnalytics(records, uncategorized_label).category_summary()


def period_report(
    records: RecordsLike,
    period: str = PERIOD_MONTHLY,
    year: Optional[int] = None,
    month: Optional[int] = None,
    today: Any = None,
) -> PeriodReport:
    return TransactionAnalytics(records).period_report(period, year, month, today=today)
