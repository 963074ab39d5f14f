from datetime import datetime

import pytest

from nova.domain import CategoryTotal, Granularity, Totals, Transaction, TransactionKind
from nova.reports import aggregate, category_breakdown, monthly_budget_progress, totals

INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


def make_tx(id, amount, kind, category, date):
    return Transaction(id=id, amount=amount, description=f"tx {id}", category=category, date=date, kind=kind)


@pytest.fixture
def history():
    return (
        make_tx("t1", 60000, INCOME, "Salaire", datetime(2024, 12, 30)),
        make_tx("t2", 25000, EXPENSE, "Logement", datetime(2025, 1, 3)),
        make_tx("t3", 8500, EXPENSE, "Alimentation", datetime(2025, 1, 20)),
        make_tx("t4", 15000, INCOME, "Freelance", datetime(2025, 4, 2)),
        make_tx("t5", 1200, EXPENSE, "Factures", datetime(2025, 7, 12)),
        make_tx("t6", 300, EXPENSE, "Alimentation", datetime(2025, 7, 14)),
    )


def test_scenario_same_month_single_bucket():
    trans = (
        make_tx("a", 100, INCOME, "Salaire", datetime(2025, 3, 1)),
        make_tx("b", 40, EXPENSE, "Food", datetime(2025, 3, 10)),
        make_tx("c", 10, EXPENSE, "Food", datetime(2025, 3, 28)),
    )
    series = aggregate(trans, Granularity.MONTHLY)

    assert len(series) == 1
    point = series[0]
    assert (point.income, point.expense, point.balance) == (100, 50, 50)
    assert category_breakdown(trans) == (CategoryTotal("Food", 50),)


@pytest.mark.parametrize("granularity", list(Granularity))
def test_empty_input(granularity):
    series = aggregate((), granularity)
    assert series == ()
    assert totals(series) == Totals(0, 0, 0)


@pytest.mark.parametrize("granularity", list(Granularity))
def test_sums_are_preserved(history, granularity):
    series = aggregate(history, granularity)
    assert sum(p.income for p in series) == sum(t.amount for t in history if t.is_income)
    assert sum(p.expense for p in series) == sum(t.amount for t in history if t.is_expense)


@pytest.mark.parametrize("granularity", list(Granularity))
def test_balance_is_income_minus_expense(history, granularity):
    for point in aggregate(history, granularity):
        assert point.balance == point.income - point.expense


@pytest.mark.parametrize("granularity", list(Granularity))
def test_aggregate_is_deterministic(history, granularity):
    assert aggregate(history, granularity) == aggregate(history, granularity)
    assert aggregate(history, granularity) == aggregate(tuple(reversed(history)), granularity)


def test_totals_do_not_depend_on_granularity(history):
    results = {totals(aggregate(history, g)) for g in Granularity}
    assert results == {Totals(income=75000, expense=35000, balance=40000)}


def test_series_is_sparse_and_chronological(history):
    series = aggregate(history, Granularity.MONTHLY)
    assert [p.key for p in series] == ["2024-12", "2025-01", "2025-04", "2025-07"]
    assert [p.label for p in series] == ["déc. 24", "janv. 25", "avr. 25", "juil. 25"]


def test_weekly_series_across_year_boundary():
    trans = (
        make_tx("a", 10, EXPENSE, "Food", datetime(2025, 1, 6)),
        make_tx("b", 10, EXPENSE, "Food", datetime(2024, 12, 31)),
        make_tx("c", 10, EXPENSE, "Food", datetime(2024, 12, 23)),
        make_tx("d", 5, INCOME, "Gift", datetime(2025, 1, 1)),
    )
    series = aggregate(trans, Granularity.WEEKLY)
    assert [p.key for p in series] == ["2024-W52", "2025-W1", "2025-W2"]
    assert series[1].expense == 10
    assert series[1].income == 5


def test_category_breakdown_sorted_and_expense_only(history):
    breakdown = category_breakdown(history)
    assert breakdown == (
        CategoryTotal("Logement", 25000),
        CategoryTotal("Alimentation", 8800),
        CategoryTotal("Factures", 1200),
    )
    amounts = [c.amount for c in breakdown]
    assert amounts == sorted(amounts, reverse=True)


def test_category_breakdown_ties_by_name():
    trans = (
        make_tx("a", 50, EXPENSE, "Zoo", datetime(2025, 1, 1)),
        make_tx("b", 50, EXPENSE, "Art", datetime(2025, 1, 1)),
        make_tx("c", 70, EXPENSE, "Mid", datetime(2025, 1, 1)),
    )
    assert [c.category for c in category_breakdown(trans)] == ["Mid", "Art", "Zoo"]


def test_budget_over_limit_is_clamped():
    trans = (
        make_tx("a", 150, EXPENSE, "Food", datetime(2025, 3, 2)),
        make_tx("b", 100, EXPENSE, "Food", datetime(2025, 3, 20)),
    )
    (entry,) = monthly_budget_progress(trans, {"Food": 200}, datetime(2025, 3, 31))
    assert entry.category == "Food"
    assert entry.spent == 250
    assert entry.limit == 200
    assert entry.percent == 100
    assert entry.is_over
    assert entry.ratio == 1.25


def test_budget_without_limit_has_zero_percent():
    trans = (make_tx("a", 999, EXPENSE, "Fun", datetime(2025, 3, 2)),)
    (entry,) = monthly_budget_progress(trans, {"Fun": 0}, datetime(2025, 3, 5))
    assert entry.spent == 999
    assert entry.percent == 0
    assert not entry.is_limited


def test_budget_only_counts_reference_month_expenses():
    trans = (
        make_tx("a", 40, EXPENSE, "Food", datetime(2025, 3, 2)),
        make_tx("b", 60, EXPENSE, "Food", datetime(2025, 2, 28)),
        make_tx("c", 80, EXPENSE, "Food", datetime(2024, 3, 15)),
        make_tx("d", 500, INCOME, "Food", datetime(2025, 3, 3)),
    )
    (entry,) = monthly_budget_progress(trans, {"Food": 200}, datetime(2025, 3, 10))
    assert entry.spent == 40
    assert entry.percent == 20


def test_budget_lists_unspent_limits_and_orders_limited_first():
    trans = (
        make_tx("a", 30, EXPENSE, "Cinema", datetime(2025, 3, 2)),
        make_tx("b", 20, EXPENSE, "Bakery", datetime(2025, 3, 3)),
    )
    budgets = {"Transport": 100, "Bakery": 50, "Removed": 10}
    entries = monthly_budget_progress(trans, budgets, datetime(2025, 3, 15))

    assert [e.category for e in entries] == ["Bakery", "Removed", "Transport", "Cinema"]
    transport = entries[2]
    assert transport.spent == 0 and transport.percent == 0
    assert entries[0].percent == 40
