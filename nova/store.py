import logging
from typing import Optional

from nova import transforms
from nova.domain import AppState, Theme, Transaction, TransactionKind
from nova.events import (
    BUDGET_EXCEEDED,
    BUDGETS_CHANGED,
    CATEGORIES_CHANGED,
    STATE_EVENTS,
    THEME_CHANGED,
    TRANSACTIONS_CHANGED,
    EventBus,
)
from nova.functional import check_budget, validate_transaction
from nova.persistence import JsonFileStorage, persistence_handler

logger = logging.getLogger(__name__)


class AppStore:
    """Single owner of the application state.

    Every mutation swaps in a new AppState and publishes one event naming the
    slice that changed; readers always see a complete snapshot.
    """

    def __init__(self, state: AppState, bus: Optional[EventBus] = None):
        self._state = state
        self.bus = bus or EventBus()

    @property
    def state(self) -> AppState:
        return self._state

    def _commit(self, new_state: AppState, event_name: str, **extra) -> AppState:
        if new_state is self._state:
            return new_state
        self._state = new_state
        self.bus.publish(event_name, {"state": new_state, **extra})
        return new_state

    def add_transaction(self, t: Transaction) -> AppState:
        result = validate_transaction(t)
        if result.is_left():
            error = result.get_error()
            logger.warning("Rejected transaction: %s", error["message"])
            raise ValueError(error["message"])
        if any(x.id == t.id for x in self._state.transactions):
            logger.warning("Rejected transaction: duplicate id %s", t.id)
            raise ValueError(f"Transaction id {t.id} already exists")

        state = self._commit(transforms.add_transaction(self._state, t), TRANSACTIONS_CHANGED, transaction_id=t.id)
        if t.kind is TransactionKind.EXPENSE:
            self._check_budget(t)
        return state

    def _check_budget(self, t: Transaction) -> None:
        limit = self._state.budgets.get(t.category) or 0.0
        if limit <= 0:
            return
        spent = sum(
            x.amount for x in self._state.transactions
            if x.is_expense
            and x.category == t.category
            and x.date.year == t.date.year
            and x.date.month == t.date.month
        )
        verdict = check_budget(t.category, spent, limit)
        if verdict.is_left():
            error = verdict.get_error()
            logger.info(error["message"])
            self.bus.publish(BUDGET_EXCEEDED, error)

    def delete_transaction(self, tid: str) -> AppState:
        return self._commit(transforms.delete_transaction(self._state, tid), TRANSACTIONS_CHANGED, transaction_id=tid)

    def add_category(self, kind: TransactionKind, name: str) -> AppState:
        name = name.strip()
        if not name:
            return self._state
        return self._commit(transforms.add_category(self._state, kind, name), CATEGORIES_CHANGED)

    def delete_category(self, kind: TransactionKind, name: str) -> AppState:
        return self._commit(transforms.delete_category(self._state, kind, name), CATEGORIES_CHANGED)

    def update_budget(self, category: str, limit: float) -> AppState:
        return self._commit(transforms.update_budget(self._state, category, max(0.0, limit)), BUDGETS_CHANGED)

    def set_theme(self, theme: Theme) -> AppState:
        if theme is self._state.theme:
            return self._state
        return self._commit(transforms.set_theme(self._state, theme), THEME_CHANGED)

    def toggle_theme(self) -> AppState:
        return self._commit(transforms.toggle_theme(self._state), THEME_CHANGED)


def attach_persistence(store: AppStore, storage: JsonFileStorage) -> None:
    for name in STATE_EVENTS:
        store.bus.subscribe(name, persistence_handler(storage, name))
