from collections import defaultdict
from datetime import datetime
from typing import Iterable

from nova.domain import (
    BudgetProgress,
    Budgets,
    CategoryTotal,
    Granularity,
    ReportDataPoint,
    Totals,
    Transaction,
)
from nova.periods import DEFAULT_LOCALE, bucket_key_for


def aggregate(
    trans: Iterable[Transaction],
    granularity: Granularity,
    locale: str = DEFAULT_LOCALE,
) -> tuple[ReportDataPoint, ...]:
    """Group transactions into period buckets, oldest first.

    Only periods that hold at least one transaction appear. Buckets sharing a
    sort time are ordered by key.
    """
    buckets: dict[str, dict] = {}

    for t in trans:
        key, label, sort_time = bucket_key_for(t, granularity, locale)
        entry = buckets.get(key)
        if entry is None:
            entry = buckets[key] = {"label": label, "sort_time": sort_time, "income": 0.0, "expense": 0.0}

        if t.is_income:
            entry["income"] += t.amount
        else:
            entry["expense"] += t.amount

    points = (
        ReportDataPoint(
            key=key,
            label=e["label"],
            income=e["income"],
            expense=e["expense"],
            balance=e["income"] - e["expense"],
            sort_time=e["sort_time"],
        )
        for key, e in buckets.items()
    )
    return tuple(sorted(points, key=lambda p: (p.sort_time, p.key)))


def category_breakdown(trans: Iterable[Transaction]) -> tuple[CategoryTotal, ...]:
    """Expense totals per category, largest first, ties by name."""
    totals_by_category: dict[str, float] = defaultdict(float)

    for t in trans:
        if t.is_expense:
            totals_by_category[t.category] += t.amount

    ordered = sorted(totals_by_category.items(), key=lambda item: (-item[1], item[0]))
    return tuple(CategoryTotal(name, amount) for name, amount in ordered if amount > 0)


def totals(series: Iterable[ReportDataPoint]) -> Totals:
    income = expense = 0.0
    for point in series:
        income += point.income
        expense += point.expense
    return Totals(income=income, expense=expense, balance=income - expense)


def monthly_budget_progress(
    trans: Iterable[Transaction],
    budgets: Budgets,
    reference_date: datetime,
) -> tuple[BudgetProgress, ...]:
    """Spend against each monthly limit for the month of `reference_date`.

    Categories with spending but no limit are listed too, after the limited
    ones. Categories with a limit but no spending appear with spent = 0.
    """
    spent_by_category: dict[str, float] = defaultdict(float)
    for t in trans:
        if (
            t.is_expense
            and t.date.month == reference_date.month
            and t.date.year == reference_date.year
        ):
            spent_by_category[t.category] += t.amount

    entries = []
    for category in set(spent_by_category) | set(budgets):
        spent = spent_by_category.get(category, 0.0)
        limit = budgets.get(category) or 0.0
        percent = min(100.0, spent / limit * 100) if limit > 0 else 0.0
        entries.append(BudgetProgress(category=category, spent=spent, limit=limit, percent=percent))

    return tuple(sorted(entries, key=lambda e: (not e.is_limited, e.category)))
