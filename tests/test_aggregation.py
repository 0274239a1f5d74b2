"""Unit tests for expense_tracker.aggregation."""

from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from expense_tracker import config
from expense_tracker.aggregation import (
    PERIOD_ALL,
    PERIOD_MONTHLY,
    PERIOD_YEARLY,
    Totals,
    TransactionAnalytics,
    category_summary,
    compute_totals,
    monthly_summary,
    period_report,
)


def sample_records():
    return [
        {'id': 'a', 'type': 'income', 'title': 'Salary', 'amount': 50000, 'date': '2024-03-01', 'category': 'Salary'},
        {'id': 'b', 'type': 'expense', 'title': 'Groceries', 'amount': 2500, 'date': '2024-03-05', 'category': 'Food'},
        {'id': 'c', 'type': 'income', 'title': 'Bonus', 'amount': 15000, 'date': '2024-01-20', 'category': 'Bonus'},
        {'id': 'd', 'type': 'expense', 'title': 'Dinner', 'amount': 3200, 'date': '2024-01-22', 'category': 'Food'},
    ]


def test_totals_end_to_end() -> None:
    totals = compute_totals(sample_records())
    assert totals == Totals(income=65000.0, expense=5700.0, balance=59300.0, count=4)


def test_totals_decompose_into_income_and_expense() -> None:
    records = sample_records() + [
        {'type': 'expense', 'title': 'Rent', 'amount': 12000.5, 'date': '2024-02-01'},
        {'type': 'income', 'title': 'Refund', 'amount': 0.25, 'date': '2024-02-03'},
    ]
    totals = compute_totals(records)
    income = sum(r['amount'] for r in records if r['type'] == 'income')
    expense = sum(r['amount'] for r in records if r['type'] == 'expense')
    assert totals.income == income
    assert totals.expense == expense
    assert totals.balance == totals.income - totals.expense


def test_totals_of_empty_snapshot() -> None:
    assert compute_totals([]) == Totals()
    assert compute_totals(None) == Totals()


def test_malformed_amounts_are_treated_as_zero() -> None:
    records = [
        {'type': 'income', 'title': 'Missing', 'date': '2024-01-01'},
        {'type': 'income', 'title': 'Text', 'amount': 'abc', 'date': '2024-01-01'},
        {'type': 'income', 'title': 'NaN', 'amount': float('nan'), 'date': '2024-01-01'},
        {'type': 'income', 'title': 'Formatted', 'amount': '1,200', 'date': '2024-01-01'},
        {'type': 'expense', 'title': 'Numeric string', 'amount': '300.5', 'date': '2024-01-01'},
    ]
    totals = compute_totals(records)
    assert totals.income == 1200.0
    assert totals.expense == 300.5
    assert totals.count == 5


def test_unknown_type_is_counted_but_not_summed() -> None:
    records = sample_records() + [
        {'type': 'transfer', 'title': 'Move', 'amount': 999, 'date': '2024-03-02'},
        {'title': 'No type', 'amount': 10, 'date': '2024-03-02'},
    ]
    totals = compute_totals(records)
    assert totals.income == 65000.0
    assert totals.expense == 5700.0
    assert totals.count == 6


def test_type_matching_ignores_case_and_whitespace() -> None:
    totals = compute_totals([{'type': ' Income ', 'title': 'Pay', 'amount': 10, 'date': '2024-01-01'}])
    assert totals.income == 10.0


def test_accepts_dataframe_snapshot() -> None:
    totals = TransactionAnalytics(pd.DataFrame(sample_records())).totals()
    assert totals.balance == 59300.0


def test_monthly_summary_zero_fills_missing_months() -> None:
    summary = monthly_summary(sample_records(), months=3, today='2024-03-15')

    assert [m.month_key for m in summary] == ['2024-01', '2024-02', '2024-03']
    january, february, march = summary
    assert (january.income, january.expense, january.balance, january.transaction_count) == (15000.0, 3200.0, 11800.0, 2)
    assert (february.income, february.expense, february.balance, february.transaction_count) == (0.0, 0.0, 0.0, 0)
    assert (march.income, march.expense, march.balance, march.transaction_count) == (50000.0, 2500.0, 47500.0, 2)


def test_monthly_summary_crosses_year_boundary() -> None:
    summary = monthly_summary(sample_records(), months=3, today='2024-01-10')
    assert [m.month_key for m in summary] == ['2023-11', '2023-12', '2024-01']
    assert summary[-1].income == 15000.0


def test_monthly_summary_uses_transaction_date_not_created_at() -> None:
    records = [
        {'type': 'expense', 'title': 'Late entry', 'amount': 40, 'date': '2024-02-28', 'createdAt': '2024-03-02T10:00:00Z'},
        {'type': 'expense', 'title': 'Too old', 'amount': 99, 'date': '2023-12-31'},
        {'type': 'expense', 'title': 'No date', 'amount': 7},
    ]
    summary = monthly_summary(records, months=2, today='2024-03-01')
    assert [(m.month_key, m.expense) for m in summary] == [('2024-02', 40.0), ('2024-03', 0.0)]


def test_monthly_summary_keeps_wall_clock_date_of_aware_timestamps() -> None:
    records = [{'type': 'income', 'title': 'Late', 'amount': 5, 'date': '2024-03-31T23:30:00+07:00'}]
    summary = monthly_summary(records, months=2, today='2024-04-02')
    assert [(m.month_key, m.income) for m in summary] == [('2024-03', 5.0), ('2024-04', 0.0)]


def test_monthly_summary_with_no_months() -> None:
    assert monthly_summary(sample_records(), months=0) == []


def test_category_summary_sorted_by_total() -> None:
    summary = category_summary(sample_records())
    assert [c.name for c in summary] == ['Salary', 'Bonus', 'Food']
    food = summary[-1]
    assert (food.income, food.expense, food.total, food.count) == (0.0, 5700.0, 5700.0, 2)


def test_category_summary_groups_blank_categories() -> None:
    records = sample_records() + [
        {'type': 'expense', 'title': 'Cash', 'amount': 50, 'date': '2024-03-09', 'category': None},
        {'type': 'expense', 'title': 'Misc', 'amount': 25, 'date': '2024-03-09', 'category': '   '},
        {'type': 'expense', 'title': 'No key', 'amount': 5, 'date': '2024-03-09'},
    ]
    summary = category_summary(records)
    uncategorized = [c for c in summary if c.name == 'Uncategorized']
    assert len(uncategorized) == 1
    assert uncategorized[0].count == 3
    assert uncategorized[0].expense == 80.0


def test_category_summary_covers_every_record_once() -> None:
    records = sample_records() + [
        {'type': 'bogus', 'title': 'Odd', 'amount': 1, 'category': 'Food'},
        {'type': 'expense', 'title': 'Blank', 'amount': 2},
    ]
    summary = category_summary(records)
    assert sum(c.count for c in summary) == len(records)
    assert len({c.name for c in summary}) == len(summary)


def test_category_shares_add_up_to_one_hundred() -> None:
    summary = category_summary(sample_records())
    assert abs(sum(c.share for c in summary) - 100.0) < 1e-9


def test_category_summary_uses_custom_sentinel() -> None:
    summary = category_summary([{'type': 'expense', 'title': 'x', 'amount': 1}], uncategorized_label='Other')
    assert summary[0].name == 'Other'


def test_monthly_period_report_includes_daily_breakdown() -> None:
    report = period_report(sample_records(), PERIOD_MONTHLY, year=2024, month=3)

    assert report.period == PERIOD_MONTHLY
    assert (report.year, report.month) == (2024, 3)
    assert report.totals == Totals(income=50000.0, expense=2500.0, balance=47500.0, count=2)
    assert len(report.daily) == 31
    assert report.daily[0].income == 50000.0
    assert report.daily[4].expense == 2500.0
    assert report.daily[4].balance == -2500.0
    assert report.savings_rate == 95.0
    assert report.health_tier == 'excellent'


def test_february_daily_breakdown_has_leap_day() -> None:
    report = period_report(sample_records(), PERIOD_MONTHLY, year=2024, month=2)
    assert len(report.daily) == 29
    assert report.totals.count == 0
    assert report.health_tier == 'warning'


def test_yearly_and_all_time_reports() -> None:
    records = sample_records() + [{'type': 'expense', 'title': 'Old', 'amount': 100, 'date': '2023-06-01'}]

    yearly = period_report(records, PERIOD_YEARLY, year=2024)
    assert yearly.totals.count == 4
    assert yearly.month is None
    assert yearly.daily == []

    everything = period_report(records, PERIOD_ALL)
    assert everything.totals.count == 5
    assert everything.year is None


def test_unknown_period_reports_all_time() -> None:
    report = period_report(sample_records(), 'weekly', today='2024-03-10')
    assert report.period == PERIOD_ALL
    assert report.totals.count == 4


def test_current_month_totals() -> None:
    analytics = TransactionAnalytics(sample_records())
    assert analytics.current_month('2024-03-20') == Totals(income=50000.0, expense=2500.0, balance=47500.0, count=2)


def test_record_lookups() -> None:
    analytics = TransactionAnalytics(sample_records())

    assert [r['id'] for r in analytics.by_month(2024, 1)] == ['c', 'd']
    assert [r['id'] for r in analytics.by_year(2024)] == ['a', 'b', 'c', 'd']
    assert [r['id'] for r in analytics.by_date_range('2024-01-21', '2024-03-01')] == ['a', 'd']
    assert [r['id'] for r in analytics.by_date_range(start='2024-03-02')] == ['b']
    assert [r['id'] for r in analytics.by_type('expense')] == ['b', 'd']
    assert [r['id'] for r in analytics.by_category('Food')] == ['b', 'd']
    assert [r['id'] for r in analytics.recent(2)] == ['c', 'd']
    assert analytics.recent(0) == []


def test_lookups_return_copies() -> None:
    records = sample_records()
    analytics = TransactionAnalytics(records)
    analytics.by_type('income')[0]['title'] = 'changed'
    assert records[0]['title'] == 'Salary'


def test_report_to_dict_is_plain_data() -> None:
    payload = period_report(sample_records(), PERIOD_MONTHLY, year=2024, month=1).to_dict()
    assert payload['totals']['income'] == 15000.0
    assert payload['categories'][0]['name'] == 'Bonus'
    assert payload['daily'][19] == {'day': 20, 'income': 15000.0, 'expense': 0.0, 'balance': 15000.0}


@dataclass
class LedgerEntry:
    type: str
    title: str
    amount: float
    date: str


def test_totals_of_dataclass_records() -> None:
    entries = [LedgerEntry('income', 'Pay', 100.0, '2024-01-01'), LedgerEntry('expense', 'Food', 40.0, '2024-01-02')]
    assert compute_totals(entries) == Totals(income=100.0, expense=40.0, balance=60.0, count=2)
    assert [c.name for c in category_summary(entries)] == ['Uncategorized']


def test_period_report_falls_back_on_non_numeric_month_and_year() -> None:
    report = period_report(sample_records(), PERIOD_MONTHLY, year='twenty', month='abc', today='2024-01-15')
    assert (report.year, report.month) == (2024, 1)
    assert report.totals.count == 2
    assert len(report.daily) == 31


def test_period_report_accepts_numeric_strings() -> None:
    report = period_report(sample_records(), PERIOD_MONTHLY, year='2024', month='3')
    assert (report.year, report.month) == (2024, 3)
    assert report.totals.income == 50000.0


def test_monthly_summary_falls_back_on_non_numeric_months() -> None:
    summary = monthly_summary(sample_records(), months='six', today='2024-03-15')
    assert len(summary) == config.TRAILING_MONTHS
    assert summary[-1].month_key == '2024-03'


def test_current_month_counts_by_type() -> None:
    records = sample_records() + [
        {'type': 'expense', 'title': 'Taxi', 'amount': 300, 'date': '2024-03-09'},
        {'type': 'transfer', 'title': 'Move', 'amount': 10, 'date': '2024-03-10'},
    ]
    counts = TransactionAnalytics(records).current_month_counts('2024-03-20')
    assert counts == {'income': 1, 'expense': 2}
