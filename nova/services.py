from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Sequence

from nova.domain import (
    BudgetProgress,
    Budgets,
    CategoryTotal,
    Granularity,
    ReportDataPoint,
    Totals,
    Transaction,
)
from nova.functional import check_budget
from nova.periods import DEFAULT_LOCALE
from nova.reports import aggregate, category_breakdown, monthly_budget_progress, totals


@dataclass(frozen=True)
class PeriodReport:
    granularity: Granularity
    series: tuple[ReportDataPoint, ...]
    totals: Totals
    breakdown: tuple[CategoryTotal, ...]

    def newest_first(self) -> tuple[ReportDataPoint, ...]:
        return self.series[::-1]


@dataclass(frozen=True)
class BudgetReport:
    reference_date: datetime
    entries: tuple[BudgetProgress, ...]
    alerts: tuple[dict, ...]


class ReportService:
    """Facade producing everything the reports view shows for one granularity."""

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale

    def build(self, transactions: Sequence[Transaction], granularity: Granularity) -> PeriodReport:
        series = aggregate(transactions, granularity, self.locale)
        return PeriodReport(
            granularity=granularity,
            series=series,
            totals=totals(series),
            breakdown=category_breakdown(transactions),
        )


class BudgetService:
    """Facade for the monthly budget panel."""

    def monthly_report(
        self,
        transactions: Iterable[Transaction],
        budgets: Budgets,
        reference_date: Optional[datetime] = None,
    ) -> BudgetReport:
        reference_date = reference_date or datetime.now()
        entries = monthly_budget_progress(transactions, budgets, reference_date)

        alerts = []
        for entry in entries:
            verdict = check_budget(entry.category, entry.spent, entry.limit)
            if verdict.is_left():
                alerts.append(verdict.get_error())

        return BudgetReport(reference_date=reference_date, entries=entries, alerts=tuple(alerts))
