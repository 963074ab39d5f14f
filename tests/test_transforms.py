from datetime import datetime

from nova.defaults import DEFAULT_CATEGORIES, sample_transactions
from nova.domain import AppState, CategoryRegistry, Granularity, Theme, Transaction, TransactionDraft, TransactionKind
from nova.reports import aggregate
from nova.transforms import (
    add_category,
    add_transaction,
    apply_draft,
    delete_category,
    delete_transaction,
    financial_stats,
    new_transaction,
    recent_activity,
    toggle_theme,
    update_budget,
)


def make_tx(id, amount, kind, date, category="Food"):
    return Transaction(id=id, amount=amount, description=id, category=category, date=date, kind=kind)


def test_new_transaction_gets_fresh_id():
    a = new_transaction(10, "coffee", "Food", TransactionKind.EXPENSE)
    b = new_transaction(10, "coffee", "Food", TransactionKind.EXPENSE)
    assert a.id != b.id
    assert a.amount == 10.0


def test_add_transaction_prepends_and_keeps_old_state():
    t1 = make_tx("t1", 100, TransactionKind.INCOME, datetime(2025, 1, 1))
    t2 = make_tx("t2", 50, TransactionKind.EXPENSE, datetime(2025, 1, 2))
    state = AppState(transactions=(t1,))

    new_state = add_transaction(state, t2)

    assert new_state.transactions == (t2, t1)
    assert state.transactions == (t1,)


def test_delete_removes_exactly_one_transaction():
    trans = tuple(
        make_tx(f"t{i}", 10 * i, TransactionKind.EXPENSE, datetime(2025, 1, i)) for i in range(1, 5)
    )
    state = AppState(transactions=trans)

    new_state = delete_transaction(state, "t2")

    assert [t.id for t in new_state.transactions] == ["t1", "t3", "t4"]
    assert all(t is orig for t, orig in zip(new_state.transactions, (trans[0], trans[2], trans[3])))
    (point,) = aggregate(new_state.transactions, Granularity.MONTHLY)
    assert point.expense == 10 + 30 + 40


def test_delete_unknown_id_keeps_everything():
    state = AppState(transactions=(make_tx("t1", 5, TransactionKind.EXPENSE, datetime(2025, 1, 1)),))
    assert delete_transaction(state, "nope").transactions == state.transactions


def test_add_category_ignores_duplicates_within_kind():
    state = AppState(categories=CategoryRegistry(income=("Autre",), expense=("Autre",)))

    same = add_category(state, TransactionKind.EXPENSE, "Autre")
    grown = add_category(state, TransactionKind.EXPENSE, "Voyage")

    assert same is state
    assert grown.categories.expense == ("Autre", "Voyage")
    assert grown.categories.income == ("Autre",)


def test_delete_category_leaves_budget_orphaned():
    state = AppState(categories=DEFAULT_CATEGORIES, budgets={"Transport": 300})
    new_state = delete_category(state, TransactionKind.EXPENSE, "Transport")
    assert "Transport" not in new_state.categories.expense
    assert new_state.budgets == {"Transport": 300}


def test_update_budget_overwrites():
    state = update_budget(AppState(budgets={"Food": 100}), "Food", 250)
    assert state.budgets == {"Food": 250}


def test_toggle_theme():
    state = AppState()
    assert toggle_theme(state).theme is Theme.DARK
    assert toggle_theme(toggle_theme(state)).theme is Theme.LIGHT


def test_financial_stats_on_samples():
    stats = financial_stats(sample_transactions(datetime(2025, 5, 20)))
    assert stats.total_income == 75000
    assert stats.total_expense == 34700
    assert stats.balance == 40300


def test_recent_activity_newest_first():
    trans = tuple(make_tx(f"t{d}", 1, TransactionKind.EXPENSE, datetime(2025, 1, d)) for d in (3, 9, 1, 7, 5, 2))
    assert [t.id for t in recent_activity(trans)] == ["t9", "t7", "t5", "t3", "t2"]
    assert recent_activity(trans, limit=0) == ()


def test_apply_draft_keeps_known_category():
    draft = TransactionDraft(amount=2000, description="Déjeuner", kind=TransactionKind.EXPENSE, category="Alimentation")
    assert apply_draft(draft, DEFAULT_CATEGORIES) == draft


def test_apply_draft_falls_back_to_first_category_of_kind():
    draft = TransactionDraft(amount=500, description="Prime", kind=TransactionKind.INCOME, category="Alimentation")
    assert apply_draft(draft, DEFAULT_CATEGORIES).category == "Salaire"


def test_sample_transactions_fall_in_given_month():
    samples = sample_transactions(datetime(2024, 2, 29, 9, 0))
    assert {(t.date.year, t.date.month) for t in samples} == {(2024, 2)}
    assert [t.date.day for t in samples] == [1, 3, 5, 10, 12]
