"""JSON key-value persistence for the application state.

Each slice of ``AppState`` lives under its own key, one ``<key>.json`` file
per key, and is written independently after every change. Reads happen once
at startup; a missing key yields the in-code default. A file that cannot be
decoded, or decodes to the wrong shape, is logged and replaced by the default
so that a corrupt slice never prevents the application from starting.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from nova.defaults import DEFAULT_CATEGORIES, sample_transactions
from nova.domain import AppState, CategoryRegistry, Theme, Transaction, TransactionKind
from nova.events import (
    BUDGETS_CHANGED,
    CATEGORIES_CHANGED,
    THEME_CHANGED,
    TRANSACTIONS_CHANGED,
    Event,
)
from nova.functional import validate_transaction

logger = logging.getLogger(__name__)

THEME_KEY = "nova_theme"
TRANSACTIONS_KEY = "nova_transactions"
CATEGORIES_KEY = "nova_categories"
BUDGETS_KEY = "nova_budgets"

_MISSING = object()


class JsonFileStorage:
    """Directory of JSON documents addressed by key."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Decoded value of `key`, `default` if absent.

        Raises ValueError when the stored document is not valid JSON.
        """
        path = self._path(key)
        if not path.exists():
            return default
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def set(self, key: str, value: Any) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        with tmp.open("w", encoding="utf-8") as handle:
            json.dump(value, handle, ensure_ascii=False, indent=2)
        tmp.replace(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# --- (de)serialization


def parse_date(value: str) -> datetime:
    """ISO-8601 string to a naive local datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": t.id,
        "amount": t.amount,
        "description": t.description,
        "category": t.category,
        "date": t.date.isoformat(),
        "type": t.kind.value,
    }


def transaction_from_dict(d: dict) -> Transaction:
    amount = d["amount"]
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValueError(f"amount must be a number, got {amount!r}")
    return Transaction(
        id=str(d["id"]),
        amount=float(amount),
        description=str(d["description"]),
        category=str(d["category"]),
        date=parse_date(d["date"]),
        kind=TransactionKind(d["type"]),
    )


def decode_transactions(raw: Any) -> tuple[Transaction, ...]:
    if not isinstance(raw, list):
        raise ValueError(f"expected a list of transactions, got {type(raw).__name__}")

    # ids are unique within the store, the first record wins
    decoded: dict[str, Transaction] = {}
    for item in raw:
        try:
            t = transaction_from_dict(item)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Skipping malformed transaction %r: %s", item, e)
            continue

        verdict = validate_transaction(t)
        if verdict.is_left():
            logger.warning("Skipping malformed transaction %r: %s", item, verdict.get_error()["message"])
        elif t.id in decoded:
            logger.warning("Skipping duplicate transaction id %s", t.id)
        else:
            decoded[t.id] = t
    return tuple(decoded.values())


def decode_categories(raw: Any) -> CategoryRegistry:
    if not isinstance(raw, dict):
        raise ValueError(f"expected an object, got {type(raw).__name__}")
    income, expense = raw.get("income", []), raw.get("expense", [])
    if not isinstance(income, list) or not isinstance(expense, list):
        raise ValueError("income and expense must be lists")
    # keep first occurrence, names are unique within a kind
    return CategoryRegistry(
        income=tuple(dict.fromkeys(str(c) for c in income)),
        expense=tuple(dict.fromkeys(str(c) for c in expense)),
    )


def decode_budgets(raw: Any) -> dict[str, float]:
    if not isinstance(raw, dict):
        raise ValueError(f"expected an object, got {type(raw).__name__}")
    return {
        str(name): max(0.0, float(limit))
        for name, limit in raw.items()
        if isinstance(limit, (int, float)) and not isinstance(limit, bool)
    }


def _load(storage: JsonFileStorage, key: str, decode: Callable[[Any], Any], default: Callable[[], Any]) -> Any:
    try:
        raw = storage.get(key, _MISSING)
    except (ValueError, OSError) as e:
        logger.warning("Unreadable value under %s, using default: %s", key, e)
        return default()

    if raw is _MISSING:
        return default()

    try:
        return decode(raw)
    except (ValueError, TypeError) as e:
        logger.warning("Malformed value under %s, using default: %s", key, e)
        return default()


def load_state(storage: JsonFileStorage, now: Optional[datetime] = None) -> AppState:
    state = AppState(
        theme=_load(storage, THEME_KEY, Theme, lambda: Theme.LIGHT),
        transactions=_load(storage, TRANSACTIONS_KEY, decode_transactions, lambda: sample_transactions(now)),
        categories=_load(storage, CATEGORIES_KEY, decode_categories, lambda: DEFAULT_CATEGORIES),
        budgets=_load(storage, BUDGETS_KEY, decode_budgets, dict),
    )
    logger.info(
        "Loaded state: %d transactions, %d budgets, theme=%s",
        len(state.transactions), len(state.budgets), state.theme.value,
    )
    return state


def save_theme(storage: JsonFileStorage, state: AppState) -> None:
    storage.set(THEME_KEY, state.theme.value)


def save_transactions(storage: JsonFileStorage, state: AppState) -> None:
    storage.set(TRANSACTIONS_KEY, [transaction_to_dict(t) for t in state.transactions])


def save_categories(storage: JsonFileStorage, state: AppState) -> None:
    storage.set(CATEGORIES_KEY, {
        "income": list(state.categories.income),
        "expense": list(state.categories.expense),
    })


def save_budgets(storage: JsonFileStorage, state: AppState) -> None:
    storage.set(BUDGETS_KEY, dict(state.budgets))


SAVERS = {
    THEME_CHANGED: save_theme,
    TRANSACTIONS_CHANGED: save_transactions,
    CATEGORIES_CHANGED: save_categories,
    BUDGETS_CHANGED: save_budgets,
}


def save_state(storage: JsonFileStorage, state: AppState) -> None:
    for saver in SAVERS.values():
        saver(storage, state)


def persistence_handler(storage: JsonFileStorage, event_name: str):
    """Event handler writing the slice named by `event_name`.

    The payload must carry the new AppState under ``"state"``.
    """
    saver = SAVERS[event_name]

    def _handler(event: Event, payload: dict) -> dict:
        saver(storage, payload["state"])
        logger.debug("Persisted %s", event.name)
        return {"persisted": event.name}

    return _handler
