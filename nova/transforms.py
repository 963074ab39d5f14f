from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple
from uuid import uuid4

from nova.domain import (
    AppState,
    CategoryRegistry,
    FinancialStats,
    Theme,
    Transaction,
    TransactionDraft,
    TransactionKind,
)


def new_transaction(
    amount: float,
    description: str,
    category: str,
    kind: TransactionKind,
    date: Optional[datetime] = None,
) -> Transaction:
    return Transaction(
        id=str(uuid4()),
        amount=float(amount),
        description=description,
        category=category,
        date=date or datetime.now(),
        kind=kind,
    )


def add_transaction(state: AppState, t: Transaction) -> AppState:
    # newest first, like the entry list
    return replace(state, transactions=(t,) + state.transactions)


def delete_transaction(state: AppState, tid: str) -> AppState:
    return replace(state, transactions=tuple(t for t in state.transactions if t.id != tid))


def add_category(state: AppState, kind: TransactionKind, name: str) -> AppState:
    cats = state.categories
    current = cats.names_for(kind)
    if name in current:
        return state
    return replace(state, categories=_with_names(cats, kind, current + (name,)))


def delete_category(state: AppState, kind: TransactionKind, name: str) -> AppState:
    cats = state.categories
    remaining = tuple(c for c in cats.names_for(kind) if c != name)
    return replace(state, categories=_with_names(cats, kind, remaining))


def _with_names(
    cats: CategoryRegistry, kind: TransactionKind, names: Tuple[str, ...]
) -> CategoryRegistry:
    if kind is TransactionKind.INCOME:
        return replace(cats, income=names)
    return replace(cats, expense=names)


def update_budget(state: AppState, category: str, limit: float) -> AppState:
    return replace(state, budgets={**state.budgets, category: float(limit)})


def set_theme(state: AppState, theme: Theme) -> AppState:
    return replace(state, theme=theme)


def toggle_theme(state: AppState) -> AppState:
    return set_theme(state, Theme.DARK if state.theme is Theme.LIGHT else Theme.LIGHT)


def financial_stats(trans: Tuple[Transaction, ...]) -> FinancialStats:
    total_income = sum(t.amount for t in trans if t.is_income)
    total_expense = sum(t.amount for t in trans if t.is_expense)
    return FinancialStats(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
    )


def recent_activity(trans: Tuple[Transaction, ...], limit: int = 5) -> Tuple[Transaction, ...]:
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True)[: max(0, limit)])


def apply_draft(draft: TransactionDraft, cats: CategoryRegistry) -> TransactionDraft:
    """Snap a parsed draft onto a category that exists for its kind."""
    available = cats.names_for(draft.kind)
    if draft.category in available:
        return draft
    return replace(draft, category=available[0] if available else None)
