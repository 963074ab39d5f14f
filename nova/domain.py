from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Granularity(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    SEMESTERLY = "SEMESTERLY"
    YEARLY = "YEARLY"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float              # always > 0, the kind carries the sign
    description: str
    category: str
    date: datetime
    kind: TransactionKind

    @property
    def is_income(self) -> bool:
        return self.kind is TransactionKind.INCOME

    @property
    def is_expense(self) -> bool:
        return self.kind is TransactionKind.EXPENSE


@dataclass(frozen=True)
class CategoryRegistry:
    income: tuple[str, ...] = ()
    expense: tuple[str, ...] = ()

    def names_for(self, kind: TransactionKind) -> tuple[str, ...]:
        return self.income if kind is TransactionKind.INCOME else self.expense

    def all_names(self) -> list[str]:
        return sorted(set(self.income) | set(self.expense))


# category name -> monthly limit, 0 or missing means "no limit"
Budgets = Mapping[str, float]


@dataclass(frozen=True)
class AppState:
    theme: Theme = Theme.LIGHT
    transactions: tuple[Transaction, ...] = ()
    categories: CategoryRegistry = field(default_factory=CategoryRegistry)
    budgets: Budgets = field(default_factory=dict)


@dataclass(frozen=True)
class ReportDataPoint:
    key: str
    label: str
    income: float
    expense: float
    balance: float
    sort_time: datetime


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    amount: float


@dataclass(frozen=True)
class Totals:
    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0


@dataclass(frozen=True)
class BudgetProgress:
    category: str
    spent: float
    limit: float
    percent: float

    @property
    def is_limited(self) -> bool:
        return self.limit > 0

    @property
    def is_over(self) -> bool:
        return self.is_limited and self.spent > self.limit

    @property
    def ratio(self) -> float:
        """Unclamped spent/limit, 0 when no limit is set."""
        return self.spent / self.limit if self.is_limited else 0.0


@dataclass(frozen=True)
class FinancialStats:
    total_income: float
    total_expense: float
    balance: float


@dataclass(frozen=True)
class TransactionDraft:
    amount: float
    description: str
    kind: TransactionKind
    category: Optional[str] = None
