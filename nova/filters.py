from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional

from nova.domain import Transaction, TransactionKind

Predicate = Callable[[Transaction], bool]

ALL = "all"


def by_kind(kind: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return kind == ALL or t.kind.value == kind

    return _filter


def by_category(category: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return category == ALL or t.category == category

    return _filter


def by_date_range(start: Optional[date], end: Optional[date]) -> Predicate:
    # the end day is included up to its last microsecond
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end, time.max) if end else None

    def _filter(t: Transaction) -> bool:
        if lower is not None and t.date < lower:
            return False
        if upper is not None and t.date > upper:
            return False
        return True

    return _filter


def by_amount_range(min_amount: Optional[float], max_amount: Optional[float]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        if min_amount is not None and t.amount < min_amount:
            return False
        if max_amount is not None and t.amount > max_amount:
            return False
        return True

    return _filter


def by_search(term: str) -> Predicate:
    needle = term.lower()

    def _filter(t: Transaction) -> bool:
        return needle in t.description.lower()

    return _filter


def all_of(*preds: Predicate) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter


@dataclass(frozen=True)
class TransactionFilter:
    search: str = ""
    kind: str = ALL
    category: str = ALL
    start: Optional[date] = None
    end: Optional[date] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None

    def predicate(self) -> Predicate:
        return all_of(
            by_search(self.search),
            by_kind(self.kind),
            by_category(self.category),
            by_date_range(self.start, self.end),
            by_amount_range(self.min_amount, self.max_amount),
        )

    def active_count(self) -> int:
        """Number of filters set besides the search box."""
        return sum([
            self.kind != ALL,
            self.category != ALL,
            self.start is not None,
            self.end is not None,
            self.min_amount is not None,
            self.max_amount is not None,
        ])


KIND_CHOICES = (ALL, TransactionKind.INCOME.value, TransactionKind.EXPENSE.value)


def filter_transactions(
    trans: Iterable[Transaction], flt: TransactionFilter
) -> list[Transaction]:
    """Matching transactions, newest first."""
    pred = flt.predicate()
    return sorted((t for t in trans if pred(t)), key=lambda t: t.date, reverse=True)
