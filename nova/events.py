from datetime import datetime
from typing import Any, Callable, Dict, List, NamedTuple

__all__ = [
    'Event', 'EventBus', 'Handler',
    'THEME_CHANGED', 'TRANSACTIONS_CHANGED', 'CATEGORIES_CHANGED', 'BUDGETS_CHANGED',
    'BUDGET_EXCEEDED', 'STATE_EVENTS',
]

THEME_CHANGED = "THEME_CHANGED"
TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
CATEGORIES_CHANGED = "CATEGORIES_CHANGED"
BUDGETS_CHANGED = "BUDGETS_CHANGED"
BUDGET_EXCEEDED = "BUDGET_EXCEEDED"

# one event per independently persisted slice of AppState
STATE_EVENTS = (THEME_CHANGED, TRANSACTIONS_CHANGED, CATEGORIES_CHANGED, BUDGETS_CHANGED)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], Any]


class EventBus:
    """Synchronous publish/subscribe. Handlers run in subscription order."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[Any]:
        handlers = self._subscribers.get(name)
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(handlers)]
