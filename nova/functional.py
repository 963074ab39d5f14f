from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, Mapping, TypeVar

from nova.domain import Transaction, TransactionDraft, TransactionKind

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):
    """Result of an operation that can fail: Left(error) or Right(value)."""

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> Either[E, U]:
        return Right(f(self._value))

    def bind(self, f: Callable[[T], Either[E, U]]) -> Either[E, U]:
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Right carries no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> Either[E, U]:
        return self

    def bind(self, f: Callable[[T], Either[E, U]]) -> Either[E, U]:
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_transaction(t: Transaction) -> Either[dict, Transaction]:
    if not _is_number(t.amount) or t.amount <= 0:
        return Left({
            "error": "invalid_amount",
            "message": f"Amount must be a positive number, got {t.amount!r}",
            "amount": t.amount,
        })

    if not isinstance(t.kind, TransactionKind):
        return Left({
            "error": "invalid_kind",
            "message": f"Unknown transaction kind {t.kind!r}",
            "kind": t.kind,
        })

    if not t.description.strip():
        return Left({
            "error": "empty_description",
            "message": "Description must not be empty",
        })

    return Right(t)


def validate_draft(payload: Any) -> Either[dict, TransactionDraft]:
    """Check a decoded model answer against the draft schema."""
    if not isinstance(payload, Mapping):
        return Left({
            "error": "schema_violation",
            "message": f"Expected a JSON object, got {type(payload).__name__}",
        })

    missing = [k for k in ("amount", "description", "type", "category") if k not in payload]
    if missing:
        return Left({
            "error": "schema_violation",
            "message": f"Missing keys: {', '.join(missing)}",
            "missing": missing,
        })

    amount = payload["amount"]
    if not _is_number(amount):
        return Left({
            "error": "schema_violation",
            "message": f"'amount' must be a number, got {amount!r}",
        })
    if amount <= 0:
        return Left({
            "error": "schema_violation",
            "message": f"'amount' must be positive, got {amount!r}",
        })

    kind = payload["type"]
    if kind not in (TransactionKind.INCOME.value, TransactionKind.EXPENSE.value):
        return Left({
            "error": "schema_violation",
            "message": f"'type' must be income or expense, got {kind!r}",
        })

    description, category = payload["description"], payload["category"]
    if not isinstance(description, str) or not isinstance(category, str):
        return Left({
            "error": "schema_violation",
            "message": "'description' and 'category' must be strings",
        })

    return Right(TransactionDraft(
        amount=float(amount),
        description=description,
        kind=TransactionKind(kind),
        category=category,
    ))


def check_budget(category: str, spent: float, limit: float) -> Either[dict, float]:
    """Right(spent) while under the limit, Left with the overrun otherwise."""
    if limit > 0 and spent > limit:
        return Left({
            "error": "budget_exceeded",
            "message": f"Budget limit exceeded for category {category}",
            "category": category,
            "limit": limit,
            "spent": spent,
            "over_budget": spent - limit,
        })
    return Right(spent)
